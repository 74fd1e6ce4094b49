"""Java source host for the registration processor."""

from language_registration.java.environment import (
    JavaExpectedErrors,
    JavaSource,
    JavaSourceEnvironment,
)
from language_registration.java.index import JavaTypeIndex
from language_registration.java.models import (
    AnnotationModel,
    ConstantReference,
    ConstantSum,
    JavaCompilationUnit,
    JavaConstructorModel,
    JavaFieldModel,
    JavaTypeModel,
    UnsupportedConstant,
)
from language_registration.java.parser import JavaSourceParser

__all__ = [
    # Models
    "AnnotationModel",
    "ConstantReference",
    "ConstantSum",
    "JavaCompilationUnit",
    "JavaConstructorModel",
    "JavaFieldModel",
    "JavaTypeModel",
    "UnsupportedConstant",
    # Parsing and resolution
    "JavaSourceParser",
    "JavaTypeIndex",
    # Host
    "JavaExpectedErrors",
    "JavaSource",
    "JavaSourceEnvironment",
]
