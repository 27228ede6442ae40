"""Higher-level git commands built on the execution layer."""

from gitproc.commands.show import get_blob_contents, get_text_contents

__all__ = ["get_blob_contents", "get_text_contents"]
