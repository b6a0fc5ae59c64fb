"""returnsync - match marketplace return uploads to the product catalog and drop duplicates"""

from __future__ import annotations

__version__ = "0.1.0"


# Lazy imports so `import returnsync` stays cheap
def __getattr__(name: str):
    if name in ("ProductMatcher", "apply_manual_match", "search_catalog"):
        from returnsync.matching import matcher

        return getattr(matcher, name)

    if name in ("ReturnsService", "IngestResult", "CatalogMergeResult"):
        from returnsync.returns import service

        return getattr(service, name)

    if name in ("ReturnRecord", "ProductRecord", "AuthoritativeProduct", "ReturnStatus", "MatchMethod"):
        from returnsync.returns import models

        return getattr(models, name)

    if name == "InputShapeError":
        from returnsync.utils.validators import InputShapeError

        return InputShapeError

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "AuthoritativeProduct",
    "CatalogMergeResult",
    "IngestResult",
    "InputShapeError",
    "MatchMethod",
    "ProductMatcher",
    "ProductRecord",
    "ReturnRecord",
    "ReturnStatus",
    "ReturnsService",
    "apply_manual_match",
    "search_catalog",
]
