import hashlib
import json
from typing import Any, Dict, Iterable, List, Optional

from settleup.utils.money import quantize


class MerkleTree:
    """Merkle tree over snapshot records"""

    def __init__(self, leaves: Optional[List[str]] = None):
        self.leaves = leaves or []
        self.tree = []
        self.root = None
        if self.leaves:
            self.build_tree()

    @staticmethod
    def hash_data(data: str) -> str:
        """Create SHA-256 hash of data"""
        return hashlib.sha256(data.encode()).hexdigest()

    def build_tree(self):
        """Build the Merkle tree from leaves"""
        if not self.leaves:
            self.root = None
            return

        current_level = [self.hash_data(leaf) for leaf in self.leaves]
        self.tree = [current_level.copy()]

        while len(current_level) > 1:
            next_level = []
            for i in range(0, len(current_level), 2):
                left = current_level[i]
                right = current_level[i + 1] if i + 1 < len(current_level) else left
                next_level.append(self.hash_data(left + right))
            current_level = next_level
            self.tree.append(current_level.copy())

        self.root = current_level[0] if current_level else None

    def get_root(self) -> Optional[str]:
        return self.root


class SnapshotMerkleTree:
    """Fingerprint of an obligation/transfer snapshot, for caller-side caching"""

    @staticmethod
    def _leaf(kind: str, data: Dict[str, Any]) -> str:
        return json.dumps({"kind": kind, **data}, sort_keys=True, default=str)

    @staticmethod
    def obligation_to_leaf(obligation) -> str:
        """Convert obligation to leaf string"""
        splits = sorted(
            ([str(s.participant), str(quantize(s.owed))] for s in obligation.splits)
        )
        return SnapshotMerkleTree._leaf("obligation", {
            "id": str(obligation.id) if obligation.id is not None else "",
            "payer": str(obligation.payer),
            "amount": str(quantize(obligation.total_amount)),
            "splits": splits,
        })

    @staticmethod
    def transfer_to_leaf(transfer) -> str:
        """Convert transfer to leaf string"""
        return SnapshotMerkleTree._leaf("transfer", {
            "from": str(transfer.from_participant),
            "to": str(transfer.to_participant),
            "amount": str(quantize(transfer.amount)),
        })

    @staticmethod
    def build_snapshot_tree(obligations: Iterable, transfers: Iterable = ()) -> MerkleTree:
        """
        Build tree from obligations and completed transfers.

        Leaves are sorted, so input order does not change the root.
        """
        leaves = [SnapshotMerkleTree.obligation_to_leaf(o) for o in obligations]
        leaves.extend(
            SnapshotMerkleTree.transfer_to_leaf(t) for t in transfers if t.is_completed
        )
        return MerkleTree(sorted(leaves))


def snapshot_digest(obligations: Iterable, transfers: Iterable = ()) -> str:
    root = SnapshotMerkleTree.build_snapshot_tree(obligations, transfers).get_root()
    return root if root is not None else MerkleTree.hash_data("")
