"""Closed option types accepted in the ``inno_bundle`` descriptor block."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from innoBundler.utils import capitalize
from innoBundler.validation import ValidationResult


class PrivilegeMode(Enum):
    """Privilege level requested by the installer."""

    ADMIN = "admin"
    NON_ADMIN = "non_admin"
    AUTO = "auto"

    @classmethod
    def parse(cls, option: Any) -> ValidationResult["PrivilegeMode"]:
        """Parse the ``admin`` option.

        Booleans map to ADMIN/NON_ADMIN and the literal ``"auto"`` lets the
        end user choose at install time.

        Parameters:
            option: Raw option value (None means the default, ADMIN).

        Returns:
            ValidationResult with the privilege mode or an error message.
        """

        if option is None or option is True:
            return ValidationResult.ok(cls.ADMIN)
        if option is False:
            return ValidationResult.ok(cls.NON_ADMIN)
        if option == "auto":
            return ValidationResult.ok(cls.AUTO)
        return ValidationResult.fail(
            f"inno_bundle.admin is invalid: expected true, false or \"auto\", got {option!r}."
        )


class BuildArch(Enum):
    """CPU architecture accepted by the generated installer.

    Parameters:
        option: Value accepted in the descriptor.
        inno: Architecture identifier used by Inno Setup.
        cpu: CPU family used in the output file name.
    """

    X64 = ("x64", "x64os", "x86_64")
    X64_COMPATIBLE = ("x64_compatible", "x64compatible", "x86_64")

    def __init__(self, option: str, inno: str, cpu: str) -> None:
        self.option = option
        self.inno = inno
        self.cpu = cpu

    @classmethod
    def accepted_values(cls) -> list[str]:
        """Return the descriptor values accepted for ``arch``.

        Returns:
            List of accepted strings.
        """

        return [member.option for member in cls]

    @classmethod
    def parse(cls, option: Optional[Any]) -> ValidationResult["BuildArch"]:
        """Parse the ``arch`` option.

        Parameters:
            option: Raw option value (None means X64_COMPATIBLE).

        Returns:
            ValidationResult with the architecture or an error message.
        """

        if option is None:
            return ValidationResult.ok(cls.X64_COMPATIBLE)
        for member in cls:
            if option == member.option:
                return ValidationResult.ok(member)
        accepted = ", ".join(cls.accepted_values())
        return ValidationResult.fail(
            f"inno_bundle.arch is invalid: expected one of {accepted}, got {option!r}."
        )


class BuildType(Enum):
    """Build variant; only affects output directory naming."""

    DEBUG = "debug"
    PROFILE = "profile"
    RELEASE = "release"

    @property
    def dir_name(self) -> str:
        """Return the directory name for the variant (e.g. ``Release``)."""

        return capitalize(self.value)

    @classmethod
    def parse(cls, option: Any) -> ValidationResult["BuildType"]:
        """Parse a build variant name.

        Parameters:
            option: Variant name, case-insensitive.

        Returns:
            ValidationResult with the variant or an error message.
        """

        if isinstance(option, str):
            for member in cls:
                if option.strip().lower() == member.value:
                    return ValidationResult.ok(member)
        accepted = ", ".join(member.value for member in cls)
        return ValidationResult.fail(f"Build type must be one of {accepted}, got {option!r}.")
