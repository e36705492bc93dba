"""Classify free-form IAM identity strings into database principals."""

import re
from typing import Dict, Iterable, List, Optional
from ..contracts.descriptors import IamPrincipal, IamPrincipalKind
from ..utils.logging import get_logger

logger = get_logger("resolve.iam")

DEFAULT_PREFIXES = {
    "serviceAccount": IamPrincipalKind.CLOUD_IAM_SERVICE_ACCOUNT.value,
    "group": IamPrincipalKind.CLOUD_IAM_GROUP.value,
    "user": IamPrincipalKind.CLOUD_IAM_USER.value,
}
SERVICE_ACCOUNT_SUFFIX = ".gserviceaccount.com"

_PREFIX_PATTERN = re.compile(r'^([A-Za-z]+):(.+)$')


def classify_identity(
    raw: str,
    prefixes: Optional[Dict[str, str]] = None,
    service_account_suffix: str = SERVICE_ACCOUNT_SUFFIX,
) -> IamPrincipal:
    """
    Classify one identity string.

    ``serviceAccount:`` maps to a service account, ``group:`` to a group and
    anything else to an individual user. A leading ``word:`` prefix is
    stripped; a string without one is used whole.

    Args:
        raw: Identity string, e.g. "group:team@example.com"
        prefixes: Prefix -> kind mapping, checked in order
        service_account_suffix: Domain dropped from service-account user names

    Returns:
        Classified IamPrincipal
    """
    if prefixes is None:
        prefixes = DEFAULT_PREFIXES

    identity = raw.strip()
    kind = IamPrincipalKind.CLOUD_IAM_USER

    match = _PREFIX_PATTERN.match(identity)
    if match:
        prefix, identity = match.group(1), match.group(2)
        if prefix in prefixes:
            kind = IamPrincipalKind(prefixes[prefix])
        else:
            logger.warning(
                f"Unrecognized IAM identity prefix '{prefix}' in '{raw}', treating as individual user"
            )

    remote_user_name = identity
    if (
        kind == IamPrincipalKind.CLOUD_IAM_SERVICE_ACCOUNT
        and service_account_suffix
        and identity.endswith(service_account_suffix)
    ):
        remote_user_name = identity[:-len(service_account_suffix)]

    return IamPrincipal(raw=raw, kind=kind, identity=identity, remote_user_name=remote_user_name)


def classify_identities(
    raws: Iterable[str],
    prefixes: Optional[Dict[str, str]] = None,
    service_account_suffix: str = SERVICE_ACCOUNT_SUFFIX,
) -> List[IamPrincipal]:
    """Classify identities and collapse duplicates on (identity, kind), keeping first-seen order."""
    principals: Dict[str, IamPrincipal] = {}
    for raw in raws:
        principal = classify_identity(raw, prefixes, service_account_suffix)
        if principal.key in principals:
            logger.debug(f"Collapsed duplicate IAM identity: {raw}")
            continue
        principals[principal.key] = principal
    return list(principals.values())
