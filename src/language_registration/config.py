"""Configuration for LanguageRegistrationProcessor."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from language_registration.errors import ProcessorConfigError

DEFAULT_RESOURCE_PATH = "META-INF/truffle/language"
DEFAULT_BASE_TYPE = "com.oracle.truffle.api.TruffleLanguage"
DEFAULT_REGISTRATION_ANNOTATION = "com.oracle.truffle.api.TruffleLanguage.Registration"


class ProcessorConfig(BaseModel):
    """Configuration for the registration processor with Pydantic validation.

    Immutable and strict: unknown properties are rejected so that typos in
    build configuration surface immediately instead of being ignored.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
    )

    resource_path: str = Field(
        default=DEFAULT_RESOURCE_PATH,
        description="Relative path of the generated resource",
    )
    entry_prefix: str = Field(
        default="entry",
        description="Key prefix of each entry, followed by its 1-based position",
        min_length=1,
    )
    base_type: str = Field(
        default=DEFAULT_BASE_TYPE,
        description="Qualified name every registered class must be assignable to",
        min_length=1,
    )
    singleton_field: str = Field(
        default="INSTANCE",
        description="Name of the deprecated singleton field",
        min_length=1,
    )
    registration_annotation: str = Field(
        default=DEFAULT_REGISTRATION_ANNOTATION,
        description="Qualified name of the registration marker",
        min_length=1,
    )
    comment: str | None = Field(
        default=None,
        description="Leading comment of the resource (defaults to the generator name)",
    )

    @field_validator("resource_path")
    @classmethod
    def validate_resource_path(cls, v: str) -> str:
        """Ensure the resource path is relative and stays inside the output root."""
        if not v.strip():
            raise ValueError("resource_path must be a non-empty string")
        if v.startswith("/"):
            raise ValueError(f"resource_path '{v}' must be relative")
        if ".." in v.split("/"):
            raise ValueError(f"resource_path '{v}' must not contain '..'")
        return v

    @property
    def base_type_simple_name(self) -> str:
        return self.base_type.rsplit(".", 1)[-1]

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from a properties dictionary.

        Args:
            properties: Raw configuration properties

        Returns:
            Validated configuration object

        Raises:
            ProcessorConfigError: If validation fails

        """
        try:
            return cls.model_validate(properties)
        except ValidationError as e:
            raise ProcessorConfigError(
                f"Invalid registration processor configuration: {e}"
            ) from e
