from typing import Optional, Sequence, Tuple

from .collector import Directive, DeclCollector, collect_declarations, walk
from .config import Config
from .emitter import render_extern_block, render_type
from .errors import FrontEndError, ParsehError, StructuralInvariantError, UnsupportedTypeError
from .model import (
    Array,
    Bool,
    CollectResult,
    Declaration,
    Diagnostic,
    Float,
    Int,
    Named,
    Parameter,
    Pointer,
    SourceLoc,
    Unsupported,
    Void,
)
from .parser import parse_header
from .translator import TranslationContext, translate_type

__version__ = "0.1.0"


def translate_header(
    path: str,
    config: Optional[Config] = None,
    unsaved_files: Optional[Sequence[Tuple[str, str]]] = None,
) -> str:
    cfg = config or Config()
    tu = parse_header(path, cfg, unsaved_files)
    return render_extern_block(collect_declarations(tu, cfg).declarations)
