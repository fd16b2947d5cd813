from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Protocol

import boto3
from boto3.exceptions import Boto3Error
from boto3.s3.transfer import TransferConfig
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from s3transfer.exceptions import RetriesExceededError

from .config import StorageConfig
from .constants import DOWNLOAD_CONCURRENCY, PART_SIZE
from .errors import RemoteTransferError

logger = logging.getLogger(__name__)

# s3transfer gives up on socket errors with its own exception, outside Boto3Error
_STORAGE_ERRORS = (BotoCoreError, ClientError, Boto3Error, RetriesExceededError)


class ObjectStorage(Protocol):
    def upload(self, key: str, reader: BinaryIO) -> None: ...

    def download(self, key: str, writer: BinaryIO) -> None: ...


@dataclass(slots=True)
class S3Storage:
    """Object storage on an S3-compatible endpoint.

    Multipart splitting, retries and worker threads all live in boto3's
    managed transfer layer; callers see two blocking calls.
    """

    client: Any
    bucket: str
    part_size: int = PART_SIZE
    download_concurrency: int = DOWNLOAD_CONCURRENCY

    @classmethod
    def from_config(cls, config: StorageConfig) -> "S3Storage":
        boto_config = BotoConfig(
            s3={"addressing_style": "path" if config.use_path_style else "auto"},
            retries={"mode": "standard"},
        )
        kwargs: dict[str, Any] = {"endpoint_url": config.endpoint, "config": boto_config}
        try:
            if config.uses_profile:
                session = boto3.Session(profile_name=config.profile, region_name=config.region)
            else:
                session = boto3.Session(region_name=config.region)
                if config.access_key_id is not None:
                    kwargs["aws_access_key_id"] = config.access_key_id
                if config.secret_access_key is not None:
                    kwargs["aws_secret_access_key"] = config.secret_access_key
            client = session.client("s3", **kwargs)
        except _STORAGE_ERRORS as exc:
            raise RemoteTransferError(f"cannot create storage client: {exc}") from exc

        logger.debug(
            "storage client ready; endpoint=%s bucket=%s path_style=%s",
            config.endpoint,
            config.bucket,
            config.use_path_style,
        )
        return cls(client=client, bucket=config.bucket)

    def _transfer_config(self, **overrides: Any) -> TransferConfig:
        return TransferConfig(
            multipart_threshold=self.part_size,
            multipart_chunksize=self.part_size,
            **overrides,
        )

    def upload(self, key: str, reader: BinaryIO) -> None:
        try:
            self.client.upload_fileobj(reader, self.bucket, key, Config=self._transfer_config())
        except _STORAGE_ERRORS as exc:
            raise RemoteTransferError(f"upload of {key} failed: {exc}") from exc

    def download(self, key: str, writer: BinaryIO) -> None:
        config = self._transfer_config(max_concurrency=self.download_concurrency)
        try:
            self.client.download_fileobj(self.bucket, key, writer, Config=config)
        except _STORAGE_ERRORS as exc:
            raise RemoteTransferError(f"download of {key} failed: {exc}") from exc
