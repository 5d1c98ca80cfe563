"""provenance_mark -- issue and verify cryptographically linked provenance marks.

Each mark commits to the key of its successor before that successor is
published, so anyone holding two adjacent marks can check that they
were issued by the same authority, in order, with nothing swapped in.

    from provenance_mark import ProvenanceMarkGenerator, Resolution, verify_chain

    with ProvenanceMarkGenerator(Resolution.MEDIUM) as gen:
        marks = [gen.genesis(seed, info=b"v1"), gen.next_mark(info=b"v2")]
    assert verify_chain(marks).is_valid
"""

from provenance_mark.domain import ProvenanceMark, Resolution
from provenance_mark.crypto import (
    AuditReport,
    DatePolicy,
    GeneratorPhase,
    GeneratorState,
    ProvenanceMarkGenerator,
    ValidationKind,
    ValidationResult,
    advance_key,
    audit_marks,
    commit,
    derive_chain_id,
    generate_seed,
    seed_from_passphrase,
    verify_adjacent,
    verify_chain,
    verify_genesis,
)
from provenance_mark.errors import (
    DateRegression,
    InvalidSeedLength,
    InvalidTransition,
    MalformedField,
    ProvenanceError,
    SequenceExhausted,
)

__version__ = "0.1.0"

__all__ = [
    "ProvenanceMark",
    "Resolution",
    "AuditReport",
    "DatePolicy",
    "GeneratorPhase",
    "GeneratorState",
    "ProvenanceMarkGenerator",
    "ValidationKind",
    "ValidationResult",
    "advance_key",
    "audit_marks",
    "commit",
    "derive_chain_id",
    "generate_seed",
    "seed_from_passphrase",
    "verify_adjacent",
    "verify_chain",
    "verify_genesis",
    "DateRegression",
    "InvalidSeedLength",
    "InvalidTransition",
    "MalformedField",
    "ProvenanceError",
    "SequenceExhausted",
]
