"""Key chain, commitment, generation and validation.

Public API:
    advance_key, derive_chain_id, generate_seed, seed_from_passphrase
    commit, canonicalize: commitment hash and its input encoding
    ProvenanceMarkGenerator: issues the marks of one chain
    verify_adjacent, verify_chain, verify_genesis: validation
    audit_marks: batch report over an unordered set of marks
"""

from provenance_mark.crypto.audit import (
    AuditReport,
    ChainReport,
    FlaggedMark,
    SegmentReport,
    audit_marks,
)
from provenance_mark.crypto.commitment import canonicalize, commit
from provenance_mark.crypto.generator import (
    VALID_TRANSITIONS,
    DatePolicy,
    GeneratorPhase,
    GeneratorState,
    ProvenanceMarkGenerator,
)
from provenance_mark.crypto.keys import (
    advance_key,
    derive_chain_id,
    generate_seed,
    seed_from_passphrase,
)
from provenance_mark.crypto.validator import (
    ValidationKind,
    ValidationResult,
    verify_adjacent,
    verify_chain,
    verify_genesis,
)

__all__ = [
    "AuditReport",
    "ChainReport",
    "FlaggedMark",
    "SegmentReport",
    "audit_marks",
    "canonicalize",
    "commit",
    "VALID_TRANSITIONS",
    "DatePolicy",
    "GeneratorPhase",
    "GeneratorState",
    "ProvenanceMarkGenerator",
    "advance_key",
    "derive_chain_id",
    "generate_seed",
    "seed_from_passphrase",
    "ValidationKind",
    "ValidationResult",
    "verify_adjacent",
    "verify_chain",
    "verify_genesis",
]
