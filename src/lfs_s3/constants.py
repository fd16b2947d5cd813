from __future__ import annotations

EVENT_INIT = "init"
EVENT_DOWNLOAD = "download"
EVENT_UPLOAD = "upload"
EVENT_TERMINATE = "terminate"
EVENT_PROGRESS = "progress"
EVENT_COMPLETE = "complete"

ENV_ENDPOINT = "AWS_S3_ENDPOINT"
ENV_BUCKET = "S3_BUCKET"
ENV_REGION = "AWS_REGION"
ENV_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
ENV_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
ENV_PROFILE = "AWS_PROFILE"
ENV_PATH_STYLE = "S3_USEPATHSTYLE"

REQUIRED_ENV = (ENV_ENDPOINT, ENV_BUCKET)

DEFAULT_OBJECTS_DIR = ".git/lfs/objects"

PART_SIZE = 5 * 1024 * 1024
DOWNLOAD_CONCURRENCY = 1

# protocol error codes carried in {"error": {"code": ...}}
CODE_CONFIGURATION = 1
CODE_LOCAL_IO = 2
CODE_REMOTE_TRANSFER = 3

EXIT_OK = 0
EXIT_INIT_FAILED = 1
EXIT_PROTOCOL_ERROR = 2
