"""Build output asset analysis."""

import re
from pathlib import Path

from pydantic import BaseModel, Field

from pages_deployer.constants import MAX_CSS_FILE_SIZE, MAX_JS_FILE_SIZE
from pages_deployer.environments import Environment

# Bundlers append a content hash as "-<hash>" or ".<hash>." to chunk names
_HASHED_JS_NAME = re.compile(r"[-.][A-Za-z0-9_]{8,}\.m?js$")
_DEV_ARTIFACT_NAME = re.compile(r"dev|debug", re.IGNORECASE)


class AssetFile(BaseModel):
    path: str
    size: int
    ext: str | None = None


class BuildAssets(BaseModel):
    """Files of a build output directory grouped by type."""

    total_files: int = 0
    total_size: int = 0
    html_files: list[AssetFile] = Field(default_factory=list)
    js_files: list[AssetFile] = Field(default_factory=list)
    css_files: list[AssetFile] = Field(default_factory=list)
    static_assets: list[AssetFile] = Field(default_factory=list)

    def all_files(self) -> list[AssetFile]:
        return [*self.html_files, *self.js_files, *self.css_files, *self.static_assets]

    def add(self, asset: AssetFile) -> None:
        match asset.ext:
            case "html":
                self.html_files.append(asset)
            case "js" | "mjs":
                self.js_files.append(asset)
            case "css":
                self.css_files.append(asset)
            case _:
                self.static_assets.append(asset)
        self.total_files += 1
        self.total_size += asset.size


def analyze_build_assets(output_path: Path) -> BuildAssets:
    """Walk ``output_path`` recursively and classify every file by extension.

    Paths are recorded relative to ``output_path`` in POSIX form.
    """
    assets = BuildAssets()
    for file_path in sorted(output_path.rglob("*")):
        if not file_path.is_file():
            continue
        ext = file_path.suffix.lstrip(".").lower() or None
        assets.add(
            AssetFile(
                path=file_path.relative_to(output_path).as_posix(),
                size=file_path.stat().st_size,
                ext=ext,
            )
        )
    return assets


def asset_warnings(assets: BuildAssets, environment: Environment) -> list[str]:
    """Optimization and hygiene warnings for an analyzed build."""
    warnings: list[str] = []

    large_js = [f for f in assets.js_files if f.size > MAX_JS_FILE_SIZE]
    if large_js:
        warnings.append(f"Large JavaScript files detected ({len(large_js)} files > {format_file_size(MAX_JS_FILE_SIZE)})")

    large_css = [f for f in assets.css_files if f.size > MAX_CSS_FILE_SIZE]
    if large_css:
        warnings.append(f"Large CSS files detected ({len(large_css)} files > {format_file_size(MAX_CSS_FILE_SIZE)})")

    unhashed = [f for f in assets.js_files if not _HASHED_JS_NAME.search(Path(f.path).name)]
    if unhashed:
        names = ", ".join(f.path for f in unhashed[:5])
        warnings.append(f"Some JavaScript files may not include a content hash for optimal caching: {names}")

    if environment == Environment.PRODUCTION:
        source_maps = [f for f in assets.all_files() if f.path.endswith(".map")]
        if source_maps:
            warnings.append(f"Source map files found in production build ({len(source_maps)} files, may expose source code)")

    dev_artifacts = [f for f in assets.all_files() if _DEV_ARTIFACT_NAME.search(Path(f.path).name)]
    if dev_artifacts:
        names = ", ".join(f.path for f in dev_artifacts[:5])
        warnings.append(f"Development artifacts found in build output: {names}")

    return warnings


def format_file_size(size: int) -> str:
    """Human-readable size with binary units: ``0 B``, ``1.5 KB``, ``2 MB``."""
    if size < 0:
        raise ValueError("size must not be negative")
    if size == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    return f"{round(size / 1024**exponent, 2):g} {units[exponent]}"
