from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from workerforge.assets.models import AssetPageSet
from workerforge.base.config import PageConfig
from workerforge.errors import BuildError, ErrorCode

logger = logging.getLogger(__name__)


def discover_page_sets(asset_root: Path, pages: PageConfig) -> List[AssetPageSet]:
    """
    Find every page directory under `asset_root`.

    A page directory is any directory below the root holding the template
    file. All three sibling files must be present; the first incomplete
    directory fails discovery so no page is processed from a partial set.
    """
    if not asset_root.is_dir():
        raise BuildError(
            ErrorCode.ASSET_ROOT_NOT_FOUND,
            f"Asset root does not exist: {asset_root}",
            details={"path": str(asset_root)},
        )

    page_sets: List[AssetPageSet] = []
    for template in sorted(asset_root.glob(f"**/{pages.template_name}")):
        directory = template.parent
        if directory == asset_root:
            logger.debug(f"[Discovery] Ignoring {template.name} at asset root")
            continue

        key = directory.relative_to(asset_root).as_posix()
        style = directory / pages.style_name
        script = directory / pages.script_name

        for required in (style, script):
            if not required.is_file():
                raise BuildError(
                    ErrorCode.ASSET_PAGE_FILE_MISSING,
                    f"Page '{key}' is missing {required.name}",
                    details={"page": key, "file": required.name, "path": str(required)},
                )

        page_sets.append(AssetPageSet(
            key=key,
            directory=directory,
            template_path=template,
            style_path=style,
            script_path=script,
        ))

    logger.info(f"[Discovery] Found {len(page_sets)} page(s): {', '.join(p.key for p in page_sets)}")
    return page_sets
