"""Object store backends for FileGate."""

from filegate.config import StorageConfig
from filegate.storage.backend import ObjectStore


def create_object_store(config: StorageConfig) -> ObjectStore:
    """Create an object store instance based on configuration.

    Supports 'aws', 'local', and 'memory' backends.

    Args:
        config: The storage section of the FileGate configuration.

    Returns:
        An uninitialized object store.

    Raises:
        ValueError: If the backend name is unknown.
    """
    backend = config.backend
    if backend == "aws":
        from filegate.storage.aws import AWSObjectStore

        return AWSObjectStore(
            region=config.aws_region,
            endpoint_url=config.aws_endpoint_url,
            use_path_style=config.aws_use_path_style,
            access_key_id=config.aws_access_key_id,
            secret_access_key=config.aws_secret_access_key,
        )
    elif backend == "local":
        from filegate.storage.local import LocalObjectStore

        return LocalObjectStore(config.local_root)
    elif backend == "memory":
        from filegate.storage.memory import MemoryObjectStore

        return MemoryObjectStore()
    else:
        raise ValueError(f"Unknown storage backend: {backend}")
