from .records import DEFAULT_RECORD_PATH, InstanceRecord, RecordStore, resolve_instances

__all__ = ["DEFAULT_RECORD_PATH", "InstanceRecord", "RecordStore", "resolve_instances"]
