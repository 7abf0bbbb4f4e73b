import copy
import itertools

from twitchviewer.models import MODELS
from twitchviewer.storage.base import Storage


class MemStorage(Storage):
    """Dict-backed storage. Used as the test double; never in deployments."""

    def __init__(self):
        self._tables = {kind: {} for kind in MODELS}
        self._ids = {kind: itertools.count(1) for kind in MODELS}

    def _get(self, kind, record_id):
        record = self._tables[kind].get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def _find(self, kind, field, value, ignore_case=False):
        for record in self._tables[kind].values():
            current = record.get(field)
            if current is None:
                continue
            if ignore_case and isinstance(current, str) and isinstance(value, str):
                if current.lower() == value.lower():
                    return copy.deepcopy(record)
            elif current == value:
                return copy.deepcopy(record)
        return None

    def _list(self, kind):
        return [copy.deepcopy(self._tables[kind][k]) for k in sorted(self._tables[kind])]

    def _count(self, kind):
        return len(self._tables[kind])

    def _insert(self, kind, values):
        record = copy.deepcopy(values)
        record['id'] = next(self._ids[kind])
        self._tables[kind][record['id']] = record
        return copy.deepcopy(record)

    def _update(self, kind, record_id, changes):
        record = self._tables[kind].get(record_id)
        if record is None:
            return None
        record.update(copy.deepcopy(changes))
        return copy.deepcopy(record)

    def _delete(self, kind, record_id):
        return self._tables[kind].pop(record_id, None) is not None
