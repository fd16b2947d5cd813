"""lfs-s3: a Git LFS custom transfer agent for S3-compatible object storage.

The package is split the same way the protocol is:
- line framing of requests/responses vs. the dispatch state machine
- progress observation as a stream decorator, independent of real I/O
- the storage backend behind a two-call interface, so the agent stays sequential

Git LFS runs the agent as a child process and speaks JSON lines over stdio.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
