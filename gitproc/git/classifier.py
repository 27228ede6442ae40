"""Classification of git failures from their output.

Git reuses a handful of exit codes for many distinct conditions, so the only
reliable way to tell an authentication failure from a merge conflict is the
text git writes. This module keeps that knowledge in one ordered table of
``(pattern, code)`` pairs and one table of user-facing descriptions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class GitErrorCode(str, Enum):
    """Known git failure signatures."""

    SSH_KEY_AUDIT_UNVERIFIED = "SSHKeyAuditUnverified"
    SSH_AUTHENTICATION_FAILED = "SSHAuthenticationFailed"
    SSH_PERMISSION_DENIED = "SSHPermissionDenied"
    HTTPS_AUTHENTICATION_FAILED = "HTTPSAuthenticationFailed"
    REMOTE_DISCONNECTION = "RemoteDisconnection"
    HOST_DOWN = "HostDown"
    REBASE_CONFLICTS = "RebaseConflicts"
    MERGE_CONFLICTS = "MergeConflicts"
    HTTPS_REPOSITORY_NOT_FOUND = "HTTPSRepositoryNotFound"
    SSH_REPOSITORY_NOT_FOUND = "SSHRepositoryNotFound"
    PUSH_NOT_FAST_FORWARD = "PushNotFastForward"
    BRANCH_DELETION_FAILED = "BranchDeletionFailed"
    DEFAULT_BRANCH_DELETION_FAILED = "DefaultBranchDeletionFailed"
    REVERT_CONFLICTS = "RevertConflicts"
    EMPTY_REBASE_PATCH = "EmptyRebasePatch"
    NO_MATCHING_REMOTE_BRANCH = "NoMatchingRemoteBranch"
    NOTHING_TO_COMMIT = "NothingToCommit"
    NO_SUBMODULE_MAPPING = "NoSubmoduleMapping"
    SUBMODULE_REPOSITORY_DOES_NOT_EXIST = "SubmoduleRepositoryDoesNotExist"
    INVALID_SUBMODULE_SHA = "InvalidSubmoduleSHA"
    LOCAL_PERMISSION_DENIED = "LocalPermissionDenied"
    INVALID_MERGE = "InvalidMerge"
    INVALID_REBASE = "InvalidRebase"
    NON_FAST_FORWARD_MERGE_INTO_EMPTY_HEAD = "NonFastForwardMergeIntoEmptyHead"
    PATCH_DOES_NOT_APPLY = "PatchDoesNotApply"
    BRANCH_ALREADY_EXISTS = "BranchAlreadyExists"
    BAD_REVISION = "BadRevision"
    NOT_A_GIT_REPOSITORY = "NotAGitRepository"
    PROTECTED_BRANCH_FORCE_PUSH = "ProtectedBranchForcePush"
    PROTECTED_BRANCH_REQUIRES_REVIEW = "ProtectedBranchRequiresReview"
    PUSH_WITH_FILE_SIZE_EXCEEDING_LIMIT = "PushWithFileSizeExceedingLimit"
    HEX_BRANCH_NAME_REJECTED = "HexBranchNameRejected"
    FORCE_PUSH_REJECTED = "ForcePushRejected"
    INVALID_REF_LENGTH = "InvalidRefLength"


# Order matters: the first matching pattern wins, so specific signatures
# must precede the generic ones they overlap with.
_PATTERNS: list[tuple[str, GitErrorCode]] = [
    (
        r"ERROR: ([\s\S]+?)\n+\[EPOLICYKEYAGE\]\n+fatal: Could not read from remote repository.",
        GitErrorCode.SSH_KEY_AUDIT_UNVERIFIED,
    ),
    (r"fatal: Authentication failed for 'https://", GitErrorCode.HTTPS_AUTHENTICATION_FAILED),
    (r"fatal: Authentication failed", GitErrorCode.SSH_AUTHENTICATION_FAILED),
    (r"fatal: Could not read from remote repository.", GitErrorCode.SSH_PERMISSION_DENIED),
    (r"The requested URL returned error: 403", GitErrorCode.HTTPS_AUTHENTICATION_FAILED),
    (r"fatal: The remote end hung up unexpectedly", GitErrorCode.REMOTE_DISCONNECTION),
    (
        r"fatal: unable to access '(.+)': Failed to connect to (.+): Host is down",
        GitErrorCode.HOST_DOWN,
    ),
    (r"Failed to merge in the changes.", GitErrorCode.REBASE_CONFLICTS),
    (
        r"(Merge conflict|Automatic merge failed; fix conflicts and then commit the result.)",
        GitErrorCode.MERGE_CONFLICTS,
    ),
    (r"fatal: repository '(.+)' not found", GitErrorCode.HTTPS_REPOSITORY_NOT_FOUND),
    (r"ERROR: Repository not found", GitErrorCode.SSH_REPOSITORY_NOT_FOUND),
    (
        r"\((non-fast-forward|fetch first)\)\nerror: failed to push some refs to '.*'",
        GitErrorCode.PUSH_NOT_FAST_FORWARD,
    ),
    (
        r"error: unable to delete '(.+)': remote ref does not exist",
        GitErrorCode.BRANCH_DELETION_FAILED,
    ),
    (
        r"\[remote rejected\] (.+) \(deletion of the current branch prohibited\)",
        GitErrorCode.DEFAULT_BRANCH_DELETION_FAILED,
    ),
    (
        r"error: could not revert .*\n"
        r"hint: after resolving the conflicts, mark the corrected paths\n"
        r"hint: with 'git add <paths>' or 'git rm <paths>'\n"
        r"hint: and commit the result with 'git commit'",
        GitErrorCode.REVERT_CONFLICTS,
    ),
    (
        r"Applying: .*\n"
        r"No changes - did you forget to use 'git add'\?\n"
        r"If there is nothing left to stage, chances are that something else\n.*",
        GitErrorCode.EMPTY_REBASE_PATCH,
    ),
    (
        r"There are no candidates for (rebasing|merging) among the refs that you just fetched.\n"
        r"Generally this means that you provided a wildcard refspec which had no\n"
        r"matches on the remote end.",
        GitErrorCode.NO_MATCHING_REMOTE_BRANCH,
    ),
    (r"nothing to commit", GitErrorCode.NOTHING_TO_COMMIT),
    (
        r"No submodule mapping found in .gitmodules for path '(.+)'",
        GitErrorCode.NO_SUBMODULE_MAPPING,
    ),
    (
        r"fatal: repository '(.+)' does not exist\n"
        r"fatal: clone of '.+' into submodule path '(.+)' failed",
        GitErrorCode.SUBMODULE_REPOSITORY_DOES_NOT_EXIST,
    ),
    (
        r"Fetched in submodule path '(.+)', but it did not contain (.+). "
        r"Direct fetching of that commit failed.",
        GitErrorCode.INVALID_SUBMODULE_SHA,
    ),
    (
        r"fatal: could not create work tree dir '(.+)'.*: Permission denied",
        GitErrorCode.LOCAL_PERMISSION_DENIED,
    ),
    (r"merge: (.+) - not something we can merge", GitErrorCode.INVALID_MERGE),
    (r"invalid upstream (.+)", GitErrorCode.INVALID_REBASE),
    (
        r"fatal: Non-fast-forward commit does not make sense into an empty head",
        GitErrorCode.NON_FAST_FORWARD_MERGE_INTO_EMPTY_HEAD,
    ),
    (
        r"error: (.+): (patch does not apply|already exists in working directory)",
        GitErrorCode.PATCH_DOES_NOT_APPLY,
    ),
    (r"fatal: A branch named '(.+)' already exists.", GitErrorCode.BRANCH_ALREADY_EXISTS),
    (r"fatal: bad revision '(.*)'", GitErrorCode.BAD_REVISION),
    (
        r"fatal: [Nn]ot a git repository "
        r"\((or any of the parent directories|or any parent up to mount point .+)\)",
        GitErrorCode.NOT_A_GIT_REPOSITORY,
    ),
    # GitHub-specific hooks
    (
        r"error: GH003: Sorry, force-pushing to (.+) is not allowed.",
        GitErrorCode.FORCE_PUSH_REJECTED,
    ),
    (
        r"error: GH006: Protected branch update failed for (.+)\n"
        r"remote: error: At least one approved review is required",
        GitErrorCode.PROTECTED_BRANCH_REQUIRES_REVIEW,
    ),
    (
        r"error: GH006: Protected branch update failed for (.+)\n"
        r"remote: error: Cannot force-push to a protected branch",
        GitErrorCode.PROTECTED_BRANCH_FORCE_PUSH,
    ),
    (r"error: GH001: ", GitErrorCode.PUSH_WITH_FILE_SIZE_EXCEEDING_LIMIT),
    (r"error: GH002: ", GitErrorCode.HEX_BRANCH_NAME_REJECTED),
    (
        r"error: GH005: Sorry, refs longer than (.+) bytes are not allowed",
        GitErrorCode.INVALID_REF_LENGTH,
    ),
]

# Compile patterns for efficiency
GIT_ERROR_PATTERNS: list[tuple[re.Pattern[str], GitErrorCode]] = [
    (re.compile(pattern), code) for pattern, code in _PATTERNS
]

_DESCRIPTIONS: dict[GitErrorCode, str] = {
    GitErrorCode.SSH_KEY_AUDIT_UNVERIFIED: "The SSH key is unverified.",
    GitErrorCode.SSH_AUTHENTICATION_FAILED: (
        "SSH authentication failed. Check that your SSH key is loaded and "
        "registered with the remote."
    ),
    GitErrorCode.SSH_PERMISSION_DENIED: (
        "Could not read from the remote repository. You may not have permission "
        "to access it over SSH."
    ),
    GitErrorCode.HTTPS_AUTHENTICATION_FAILED: (
        "Authentication failed. You may not have permission to access the repository."
    ),
    GitErrorCode.REMOTE_DISCONNECTION: (
        "The remote disconnected. Check your Internet connection and try again."
    ),
    GitErrorCode.HOST_DOWN: "The host is down. Check your Internet connection and try again.",
    GitErrorCode.REBASE_CONFLICTS: (
        "We found some conflicts while trying to rebase. Please resolve the "
        "conflicts before continuing."
    ),
    GitErrorCode.MERGE_CONFLICTS: (
        "We found some conflicts while trying to merge. Please resolve the "
        "conflicts and commit the changes."
    ),
    GitErrorCode.HTTPS_REPOSITORY_NOT_FOUND: (
        "The repository does not seem to exist anymore. You may not have access, "
        "or it may have been deleted or renamed."
    ),
    GitErrorCode.SSH_REPOSITORY_NOT_FOUND: (
        "The repository does not seem to exist anymore. You may not have access, "
        "or it may have been deleted or renamed."
    ),
    GitErrorCode.PUSH_NOT_FAST_FORWARD: (
        "The repository has been updated since you last pulled. Try pulling before pushing."
    ),
    GitErrorCode.BRANCH_DELETION_FAILED: (
        "Could not delete the branch. It was probably already deleted."
    ),
    GitErrorCode.DEFAULT_BRANCH_DELETION_FAILED: (
        "The branch is the repository's default branch and cannot be deleted."
    ),
    GitErrorCode.REVERT_CONFLICTS: "To finish reverting, please merge and commit the changes.",
    GitErrorCode.EMPTY_REBASE_PATCH: "There aren't any changes left to apply.",
    GitErrorCode.NO_MATCHING_REMOTE_BRANCH: (
        "There aren't any remote branches that match the current branch."
    ),
    GitErrorCode.NOTHING_TO_COMMIT: "There are no changes to commit.",
    GitErrorCode.NO_SUBMODULE_MAPPING: (
        "A submodule was removed from .gitmodules, but the folder still exists in "
        "the repository. Delete the folder, commit the change, then try again."
    ),
    GitErrorCode.SUBMODULE_REPOSITORY_DOES_NOT_EXIST: (
        "A submodule points to a location which does not exist."
    ),
    GitErrorCode.INVALID_SUBMODULE_SHA: "A submodule points to a commit which does not exist.",
    GitErrorCode.LOCAL_PERMISSION_DENIED: (
        "Permission denied while writing to the local file system."
    ),
    GitErrorCode.INVALID_MERGE: "This is not something we can merge.",
    GitErrorCode.INVALID_REBASE: "This is not something we can rebase.",
    GitErrorCode.NON_FAST_FORWARD_MERGE_INTO_EMPTY_HEAD: (
        "The merge you attempted is not a fast-forward, so it cannot be performed "
        "on an empty branch."
    ),
    GitErrorCode.PATCH_DOES_NOT_APPLY: (
        "The requested changes conflict with one or more files in the repository."
    ),
    GitErrorCode.BRANCH_ALREADY_EXISTS: "A branch with that name already exists.",
    GitErrorCode.BAD_REVISION: "Bad revision.",
    GitErrorCode.NOT_A_GIT_REPOSITORY: "This is not a git repository.",
    GitErrorCode.PROTECTED_BRANCH_FORCE_PUSH: (
        "This branch is protected from force-push operations."
    ),
    GitErrorCode.PROTECTED_BRANCH_REQUIRES_REVIEW: (
        "This branch is protected and any changes requires an approved review. "
        "Open a pull request with changes targeting this branch instead."
    ),
    GitErrorCode.PUSH_WITH_FILE_SIZE_EXCEEDING_LIMIT: (
        "The push operation includes a file which exceeds GitHub's file size "
        "restriction of 100MB. Please remove the file from history and try again."
    ),
    GitErrorCode.HEX_BRANCH_NAME_REJECTED: (
        "The branch name cannot be a 40-character string of hexadecimal characters, "
        "as this is the format that Git uses for representing objects."
    ),
    GitErrorCode.FORCE_PUSH_REJECTED: "The force push has been rejected for the current branch.",
    GitErrorCode.INVALID_REF_LENGTH: "A ref cannot be longer than 255 characters.",
}


@dataclass(frozen=True)
class ClassifiedError:
    """A recognized git failure and its user-facing description."""

    code: GitErrorCode
    description: str


def parse_error(text: str) -> Optional[GitErrorCode]:
    """Find the first known failure signature in git output.

    Args:
        text: Output written by git.

    Returns:
        The matching error code, or None if no signature matches.
    """
    for pattern, code in GIT_ERROR_PATTERNS:
        if pattern.search(text):
            return code
    return None


def get_description(code: GitErrorCode) -> str:
    """Get the fixed description for an error code.

    Raises:
        ValueError: If ``code`` is not a known error code.
    """
    if not isinstance(code, GitErrorCode):
        raise ValueError(f"Unknown error: {code!r}")
    return _DESCRIPTIONS[code]


def classify(stderr: str, stdout: str = "") -> Optional[ClassifiedError]:
    """Classify a failed git command from its output.

    Stderr is searched first; stdout is only consulted when stderr holds no
    known signature.

    Args:
        stderr: Standard error of the failed command.
        stdout: Standard output of the failed command.

    Returns:
        The classified error, or None if the failure is not recognized.
    """
    code = parse_error(stderr)
    if code is None:
        code = parse_error(stdout)
    if code is None:
        return None
    return ClassifiedError(code=code, description=get_description(code))
