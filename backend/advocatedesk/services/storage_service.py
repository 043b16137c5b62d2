# advocatedesk/services/storage_service.py

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from advocatedesk.core.config import settings
from advocatedesk.core.logger import logger


class StorageError(Exception):
    """Raised when an object store call fails."""


@dataclass
class StoredObject:
    key: str
    size: int
    last_modified: Optional[datetime] = None


class S3ObjectStore:
    """
    Object store for case documents and profile images, backed by S3 or any
    S3-compatible endpoint.
    """

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.S3_BUCKET_NAME
        self._client = client

    @property
    def s3_client(self):
        if self._client is None:
            self._client = boto3.client(
                's3',
                region_name=settings.AWS_REGION,
                endpoint_url=settings.S3_ENDPOINT_URL,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            )
        return self._client

    def save(self, key: str, data: bytes, content_type: str = "application/octet-stream", metadata: Optional[dict] = None):
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                Metadata=metadata or {},
            )
            logger.info(f"Object stored: {key} ({len(data)} bytes)")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to store object {key}: {str(e)}")
            raise StorageError(str(e)) from e

    def signed_read_url(self, key: str, expires_in: Optional[int] = None) -> str:
        """
        Generate pre-signed URL for GET operation (download).
        """
        try:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': key},
                ExpiresIn=expires_in or settings.SIGNED_URL_TTL_SECONDS,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to generate download URL for {key}: {str(e)}")
            raise StorageError(str(e)) from e

    def list(self, prefix: str = "") -> List[StoredObject]:
        objects: List[StoredObject] = []
        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for item in page.get('Contents', []):
                    objects.append(
                        StoredObject(
                            key=item['Key'],
                            size=int(item.get('Size', 0)),
                            last_modified=item.get('LastModified'),
                        )
                    )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list objects under {prefix!r}: {str(e)}")
            raise StorageError(str(e)) from e
        return objects

    def delete(self, key: str):
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=key)
            logger.info(f"Object deleted: {key}")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete object {key}: {str(e)}")
            raise StorageError(str(e)) from e

    def exists(self, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise StorageError(str(e)) from e
        except BotoCoreError as e:
            raise StorageError(str(e)) from e

    def read(self, key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=key)
            return response['Body'].read()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to read object {key}: {str(e)}")
            raise StorageError(str(e)) from e

    def ping(self) -> bool:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Object store unreachable: {str(e)}")
            return False


_store: Optional[S3ObjectStore] = None


def get_object_store() -> S3ObjectStore:
    """FastAPI dependency returning the process-wide store."""
    global _store
    if _store is None:
        _store = S3ObjectStore()
    return _store
