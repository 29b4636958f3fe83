"""Branch validation service for cazdo."""

import re
from typing import Iterable, List, Optional, Sequence

from cazdo.exceptions import BranchProtectedError, CurrentBranchError
from cazdo.models.branch import Branch, BranchRef

_DIGIT_RUN = re.compile(r"[0-9]+")
MAX_WORK_ITEM_ID = 2**64 - 1


def extract_work_item_id(branch_name: str) -> Optional[int]:
    """Return the first run of digits in a branch name as an integer.

    Only the first run counts, so ``release/v2.1-fix-123`` yields ``2``.
    Leading zeros are part of the value (``wi007`` yields ``7``).

    Args:
        branch_name: Name of the branch

    Returns:
        The work item id, or None if the name contains no digits or the
        first run does not fit in an unsigned 64-bit integer
    """
    match = _DIGIT_RUN.search(branch_name)
    if match is None:
        return None
    digits = match.group().lstrip("0") or "0"
    # int() rejects digit strings past sys.get_int_max_str_digits()
    if len(digits) > len(str(MAX_WORK_ITEM_ID)):
        return None
    value = int(digits)
    if value > MAX_WORK_ITEM_ID:
        return None
    return value


class BranchValidationService:
    """Service for validating branch operations."""

    @staticmethod
    def matches_pattern(branch_name: str, pattern: str) -> bool:
        """
        Check if a branch name matches a protection pattern.

        ``*`` matches any sequence of characters, including an empty one and
        ``/``. Every other character matches itself. The whole name must match.

        Args:
            branch_name: Name of the branch
            pattern: Pattern such as ``main`` or ``releases/*``

        Returns:
            True if the pattern matches the full branch name
        """
        text_pos = 0
        pattern_pos = 0
        star_pos = -1  # pattern index just after the last '*'
        star_text = 0  # text index the last '*' is currently absorbing up to

        while text_pos < len(branch_name):
            if pattern_pos < len(pattern) and pattern[pattern_pos] == "*":
                star_pos = pattern_pos + 1
                star_text = text_pos
                pattern_pos += 1
            elif pattern_pos < len(pattern) and pattern[pattern_pos] == branch_name[text_pos]:
                text_pos += 1
                pattern_pos += 1
            elif star_pos != -1:
                # Let the last '*' absorb one more character and retry
                star_text += 1
                text_pos = star_text
                pattern_pos = star_pos
            else:
                return False

        while pattern_pos < len(pattern) and pattern[pattern_pos] == "*":
            pattern_pos += 1

        return pattern_pos == len(pattern)

    @staticmethod
    def is_protected(branch_name: str, protected_patterns: Iterable[str]) -> bool:
        """
        Check if a branch is protected.

        Args:
            branch_name: Name of the branch
            protected_patterns: Protection patterns; an empty set protects nothing

        Returns:
            True if any pattern matches the branch name
        """
        return any(
            BranchValidationService.matches_pattern(branch_name, pattern)
            for pattern in protected_patterns
        )

    @staticmethod
    def build_branch(ref: BranchRef, protected_patterns: Sequence[str]) -> Branch:
        """Derive protection and work item id for a branch reported by git."""
        return Branch(
            name=ref.name,
            is_current=ref.is_current,
            is_protected=BranchValidationService.is_protected(ref.name, protected_patterns),
            work_item_id=extract_work_item_id(ref.name),
        )

    @staticmethod
    def build_branches(refs: Iterable[BranchRef], protected_patterns: Sequence[str]) -> List[Branch]:
        return [BranchValidationService.build_branch(ref, protected_patterns) for ref in refs]

    @staticmethod
    def check_deletable(branch: Branch) -> None:
        """
        Ensure a branch may be offered for deletion.

        Args:
            branch: Branch to check

        Raises:
            BranchProtectedError: if the branch matches a protection pattern
            CurrentBranchError: if the branch is checked out
        """
        if branch.is_protected:
            raise BranchProtectedError(branch.name)
        if branch.is_current:
            raise CurrentBranchError(branch.name)
