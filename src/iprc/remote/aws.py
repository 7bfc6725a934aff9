"""
AWS IAM implementation of the inline policy client.

Maps the three inline policy operations onto the boto3 IAM API of the
configured principal type and translates botocore errors into
RemoteServiceError kinds.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import PRINCIPAL_USER, VALID_PRINCIPAL_TYPES
from ..errors import RemoteErrorKind, RemoteServiceError
from ..utils.canonical_json import canonicalize

logger = logging.getLogger(__name__)

ERROR_CODE_KINDS = {
    "NoSuchEntity": RemoteErrorKind.NOT_FOUND,
    "MalformedPolicyDocument": RemoteErrorKind.MALFORMED_DOCUMENT,
    "Throttling": RemoteErrorKind.THROTTLED,
    "LimitExceeded": RemoteErrorKind.LIMIT_EXCEEDED,
}

# Parameter naming the principal in each IAM inline policy call
_PRINCIPAL_PARAMS = {
    "user": "UserName",
    "role": "RoleName",
    "group": "GroupName",
}


def error_kind(error: ClientError) -> RemoteErrorKind:
    """Classify a botocore ClientError by its error code."""
    code = error.response.get("Error", {}).get("Code", "")
    return ERROR_CODE_KINDS.get(code, RemoteErrorKind.SERVICE)


class IAMInlinePolicyClient:
    """
    Inline policies of IAM users, roles or groups.
    """

    def __init__(self, principal_type: str = PRINCIPAL_USER, client: Optional[Any] = None):
        """
        Initialize the client.

        Args:
            principal_type: user, role or group
            client: boto3 IAM client; one is created from the default
                session when omitted
        """
        if principal_type not in VALID_PRINCIPAL_TYPES:
            raise ValueError(f"Invalid principal type: {principal_type}")
        self.principal_type = principal_type
        self.client = client if client is not None else boto3.client("iam")

    def put_inline_policy(self, principal_name: str, policy_name: str, document: str) -> None:
        self._call(
            "put",
            principal_name,
            PolicyName=policy_name,
            PolicyDocument=document,
        )

    def get_inline_policy(self, principal_name: str, policy_name: str) -> str:
        response = self._call("get", principal_name, PolicyName=policy_name)
        document = response.get("PolicyDocument")
        if isinstance(document, dict):
            # botocore already unescaped and parsed it; hand back escaped text like the API
            return quote(canonicalize(document), safe="")
        return document or ""

    def delete_inline_policy(self, principal_name: str, policy_name: str) -> None:
        self._call("delete", principal_name, PolicyName=policy_name)

    def _call(self, verb: str, principal_name: str, **params) -> dict:
        operation = f"{verb}_{self.principal_type}_policy"
        params[_PRINCIPAL_PARAMS[self.principal_type]] = principal_name

        logger.debug("IAM %s %s/%s", operation, principal_name, params.get("PolicyName"))
        try:
            return getattr(self.client, operation)(**params)
        except ClientError as e:
            raise RemoteServiceError(error_kind(e), str(e)) from e
        except BotoCoreError as e:
            raise RemoteServiceError(RemoteErrorKind.SERVICE, str(e)) from e
