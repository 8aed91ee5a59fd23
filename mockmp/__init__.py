# mockmp/__init__.py
"""
mockmp -- call interception, stubbing and verification for test doubles.

Canonical imports:
    from mockmp import Mocker, is_any, is_equal
    from mockmp.errors import UnmockedCallError, VerificationMismatch
"""
from mockmp.errors import (  # noqa: F401
    ConstraintMixError,
    DispatchPathMismatch,
    MockError,
    MockUsageError,
    UnmockedCallError,
    VerificationMismatch,
)
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
)
from mockmp.core.domain import (  # noqa: F401
    BehavioralUnit,
    Invocation,
    MemberKind,
    MemberSignature,
    VerificationBlock,
)
from mockmp.config import MockSettings, get_settings  # noqa: F401
from mockmp.injection import FAKE, MOCK, inject_mocks  # noqa: F401
from mockmp.mocker import Mocker, StubBuilder, UnitHandle  # noqa: F401
from mockmp.proxy import Mock, unit_of  # noqa: F401

__version__ = "0.1.0"
