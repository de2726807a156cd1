from .metadata_storage import MetadataStorage
