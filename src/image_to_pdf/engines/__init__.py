from .base import DocumentEmitter, EmittedDocument
from .pillow_engine import PillowEmitter
from .pypdfium2_engine import Pypdfium2Emitter

__all__ = ["DocumentEmitter", "EmittedDocument", "PillowEmitter", "Pypdfium2Emitter"]
