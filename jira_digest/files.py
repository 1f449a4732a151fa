"""
File helpers shared by the tools
"""

import os
from pathlib import Path
from typing import Union


def atomic_write(path: Union[str, Path], content: str) -> Path:
    """Write via a sibling temp file and rename, so readers never see a partial file"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_text(content, encoding='utf-8')
    os.replace(tmp, path)
    return path
