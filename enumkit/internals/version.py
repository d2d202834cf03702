from __future__ import annotations
import sys, platform

import llvmlite
from llvmlite import binding as llvm

from enumkit import __version__ as app_ver, __dev__ as is_dev


def get_versions() -> dict[str, str]:
    llvm_lib_ver = ".".join(map(str, llvm.llvm_version_info or ())) or "unknown"
    return {
        "app": app_ver,
        "python": platform.python_version(),
        "llvmlite": getattr(llvmlite, "__version__", "unknown"),
        "llvm": llvm_lib_ver,
    }


def print_banner(file=None) -> None:
    file = file or sys.stdout
    v = get_versions()

    # ANSI styling only on an interactive terminal
    if file.isatty():
        BOLD, DIM, RESET = "\x1b[1m", "\x1b[2m", "\x1b[0m"
    else:
        BOLD, DIM, RESET = "", "", ""

    dev_marker = " (dev)" if is_dev else ""
    print(
        f"{BOLD}enumkit{RESET} {v['app']}{dev_marker}\n"
        f"{DIM}Python {v['python']} | llvmlite {v['llvmlite']} | LLVM {v['llvm']}{RESET}",
        file=file,
    )
