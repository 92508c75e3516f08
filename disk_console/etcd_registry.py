import json
from typing import List, Optional, Tuple


class EtcdRegistryStore:
    """Disk registry kept under a single etcd key.

    Writes are transactions guarded by the key's mod_revision, so a save based
    on an outdated read is refused instead of overwriting newer records.
    """

    def __init__(self, host="localhost", port=2379, key="/disk-console/disks", client=None):
        if client is None:
            import etcd3

            client = etcd3.client(host=host, port=port)
        self.client = client
        self.key = key

    # ---------- READ ----------
    def load(self) -> Tuple[List[dict], Optional[int]]:
        value, meta = self.client.get(self.key)
        if value is None:
            return [], None
        return json.loads(value.decode()), meta.mod_revision

    # ---------- WRITE WITH VERSION CONTROL ----------
    def save(self, records: List[dict], expected_version: Optional[int]) -> bool:
        txn = self.client.transactions
        if expected_version is None:
            # key must still be absent
            compare = [txn.version(self.key) == 0]
        else:
            compare = [txn.mod(self.key) == expected_version]

        success, _ = self.client.transaction(
            compare=compare,
            success=[txn.put(self.key, json.dumps(records))],
            failure=[],
        )
        return success

    # ---------- DELETE ----------
    def clear(self):
        self.client.delete(self.key)
