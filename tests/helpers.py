from typing import Any, Optional


class RecordingBackend:
    """Dict backend that records every primitive it is asked to run.

    `fail_with` makes every primitive raise the given exception, to check
    that backend failures reach the caller unchanged.
    """

    def __init__(self, can_issue_keys: bool = False, fail_with: Optional[BaseException] = None):
        self.store: dict = {}
        self.calls: list = []
        self.can_issue_keys = can_issue_keys
        self.fail_with = fail_with
        self.next_key = 0

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    async def raw_create(self, key, obj):
        self._record('create', key)
        self.store[key] = obj

    async def raw_read(self, key):
        self._record('read', key)
        return self.store.get(key)

    async def raw_update(self, key, obj):
        self._record('update', key)
        if key not in self.store:
            return False
        self.store[key] = obj
        return True

    async def raw_delete(self, key):
        self._record('delete', key)
        return self.store.pop(key, None) is not None

    async def raw_exists(self, key):
        self._record('exists', key)
        return key in self.store

    async def generate_key(self):
        self._record('generate_key', None)
        self.next_key += 1
        return f'gen-{self.next_key}'
