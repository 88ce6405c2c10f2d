"""Global constants for the deployment tool.

This module defines constants used throughout the tool to avoid hardcoded
strings and make the codebase more maintainable.
"""

# Build pipeline stage names
STAGE_INITIALIZATION = "initialization"
STAGE_PRE_VALIDATION = "pre-validation"
STAGE_CLEANUP = "cleanup"
STAGE_BUILD = "build"
STAGE_VALIDATION = "validation"
STAGE_PLATFORM_VALIDATION = "platform-validation"

# Error handling stages
STAGE_DEPLOYMENT = "deployment"

# Build project layout
MANIFEST_FILE = "package.json"
BUILD_TOOL_CONFIG_FILES = ("vite.config.ts", "vite.config.js", "vite.config.mjs")
SOURCE_DIR = "src"
ENTRY_DOCUMENT = "index.html"

# Edge platform project configuration
PLATFORM_CONFIG_FILE = "wrangler.toml"
PLATFORM_CONFIG_REQUIRED_KEYS = ("name", "compatibility_date", "pages_build_output_dir")

# Build output thresholds
MAX_JS_FILE_SIZE = 1024 * 1024
MAX_CSS_FILE_SIZE = 512 * 1024

DRY_RUN_DEPLOYMENT_ID = "dry-run-deployment-id"
