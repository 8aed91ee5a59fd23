# mockmp/core/__init__.py
"""
Core engine -- interception, stubbing and verification.

This package holds the data model, argument constraints, the call registry,
the stub table, the dispatcher, the verifier and property backing.  It knows
nothing about how mocks are represented; see ``mockmp.proxy`` and
``mockmp.mocker`` for the test-facing layer.

Canonical imports:
    from mockmp.core import Dispatcher, Verifier
    from mockmp.core.domain import Invocation, MemberSignature
    from mockmp.core.constraints import is_any, is_equal
"""
from mockmp.core.constraints import (  # noqa: F401
    Constraint,
    Failure,
    Success,
    is_any,
    is_equal,
    is_instance_of,
    is_none,
    is_not_equal,
    is_not_none,
    is_not_same,
    is_same,
    is_valid,
    match_arguments,
    normalize_arguments,
)
from mockmp.core.domain import (  # noqa: F401
    BehavioralUnit,
    CallOutcome,
    CallPattern,
    Invocation,
    MemberKind,
    MemberSignature,
    StubDefinition,
    VerificationBlock,
)
from mockmp.core.registry import CallRegistry  # noqa: F401
from mockmp.core.stubs import StubTable  # noqa: F401
from mockmp.core.dispatcher import Dispatcher  # noqa: F401
from mockmp.core.verifier import Verifier, VerificationResult  # noqa: F401
from mockmp.core.properties import PropertyBacking, PropertyCell  # noqa: F401
