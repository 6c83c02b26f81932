import rjsmin

from workerforge.errors import BuildError, ErrorCode


def compact_script(source: str) -> str:
    """Strip comments and redundant whitespace from a page script."""
    try:
        return rjsmin.jsmin(source, keep_bang_comments=False)
    except Exception as e:
        raise BuildError(
            ErrorCode.TRANSFORM_COMPACT_FAILED,
            f"Script compaction failed: {e}",
            details={"original_type": type(e).__name__},
        ) from e
