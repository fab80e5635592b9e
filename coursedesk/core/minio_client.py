from minio import Minio
from .config import settings

minio_client = Minio(
    settings.MINIO_ENDPOINT.replace("http://", "").replace("https://", ""),
    access_key=settings.MINIO_ROOT_USER,
    secret_key=settings.MINIO_ROOT_PASSWORD,
    secure=False
)

def init_minio():
    if not minio_client.bucket_exists(settings.MINIO_BUCKET_MATERIALS):
        minio_client.make_bucket(settings.MINIO_BUCKET_MATERIALS)

def get_minio_client():
    return minio_client
