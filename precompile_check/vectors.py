"""Fixed test inputs shared by every stage."""

from __future__ import annotations

# The empty input exercises the zero-length payload in both the ABI encoder
# and the native hash routine.
TEST_VECTORS: tuple[bytes, ...] = (
    b"hello world",
    b"",
    b"The quick brown fox jumps over the lazy dog",
    b"cdk-erigon",
)


def display_input(data: bytes, limit: int = 20) -> str:
    """Render an input for console output, truncating long values."""
    text = data.decode("utf-8", errors="replace")
    if len(text) > limit:
        return text[:limit] + "..."
    return text
