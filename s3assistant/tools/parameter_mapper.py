"""
Parameter Mapper - AI parameters to S3 API parameters

This module converts the loosely-typed, camelCase parameters extracted by the
LLM into the PascalCase (and partly nested) parameter shape the S3 API expects.

It combines:

1. An explicit mapping table (known keys, including nested targets such as
   CreateBucketConfiguration.LocationConstraint)
2. Type conversion for date and boolean targets
3. A capitalize-first-letter fallback for keys the table does not know yet

Architecture:
- MappingConfig owns the table and the conversion registry
- ParameterMapper applies a MappingConfig to one parameter dict per call
- Callers that need an isolated table build their own MappingConfig
"""

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)


# Scalar | timestamp | list | nested map
ParameterValue = Union[str, int, float, bool, datetime, List[Any], Dict[str, Any]]
ParameterMap = Dict[str, ParameterValue]


class ConversionKind(Enum):
    """Value coercions a target key can be registered for"""
    DATE = "date"
    BOOLEAN = "boolean"


# ============================================================================
# Built-in S3 mapping table
# ============================================================================

DEFAULT_MAPPINGS: Dict[str, str] = {
    # Common parameters across tools
    "bucketName": "Bucket",
    "fileName": "Key",
    "fileContent": "Body",

    # create_bucket
    "objectLockEnabledForBucket": "ObjectLockEnabledForBucket",
    "acl": "ACL",
    "locationConstraint": "CreateBucketConfiguration.LocationConstraint",
    "objectOwnership": "ObjectOwnership",

    # get_object
    "ifMatch": "IfMatch",
    "ifModifiedSince": "IfModifiedSince",
    "ifNoneMatch": "IfNoneMatch",
    "ifUnmodifiedSince": "IfUnmodifiedSince",
    "range": "Range",
    "responseCacheControl": "ResponseCacheControl",
    "responseContentType": "ResponseContentType",
    "responseContentDisposition": "ResponseContentDisposition",
    "responseContentEncoding": "ResponseContentEncoding",
    "responseContentLanguage": "ResponseContentLanguage",
    "responseExpires": "ResponseExpires",
    "versionId": "VersionId",
    "sseCustomerAlgorithm": "SSECustomerAlgorithm",
    "sseCustomerKey": "SSECustomerKey",
    "sseCustomerKeyMD5": "SSECustomerKeyMD5",
    "requestPayer": "RequestPayer",
    "partNumber": "PartNumber",
    "expectedBucketOwner": "ExpectedBucketOwner",
    "checksumMode": "ChecksumMode",

    # put_object
    "cacheControl": "CacheControl",
    "contentDisposition": "ContentDisposition",
    "contentEncoding": "ContentEncoding",
    "contentLanguage": "ContentLanguage",
    "contentLength": "ContentLength",
    "contentMD5": "ContentMD5",
    "contentType": "ContentType",
    "checksumAlgorithm": "ChecksumAlgorithm",
    "checksumCRC32": "ChecksumCRC32",
    "checksumCRC32C": "ChecksumCRC32C",
    "checksumSHA1": "ChecksumSHA1",
    "checksumSHA256": "ChecksumSHA256",
    "expires": "Expires",
    "grantFullControl": "GrantFullControl",
    "grantRead": "GrantRead",
    "grantReadACP": "GrantReadACP",
    "grantWriteACP": "GrantWriteACP",
    "metadata": "Metadata",
    "serverSideEncryption": "ServerSideEncryption",
    "storageClass": "StorageClass",
    "websiteRedirectLocation": "WebsiteRedirectLocation",
    "sseKMSKeyId": "SSEKMSKeyId",
    "sseKMSEncryptionContext": "SSEKMSEncryptionContext",
    "bucketKeyEnabled": "BucketKeyEnabled",
    "tagging": "Tagging",
    "objectLockMode": "ObjectLockMode",
    "objectLockRetainUntilDate": "ObjectLockRetainUntilDate",
    "objectLockLegalHoldStatus": "ObjectLockLegalHoldStatus",

    # list_buckets
    "maxBuckets": "MaxBuckets",
    "continuationToken": "ContinuationToken",
    "prefix": "Prefix",
    "bucketRegion": "BucketRegion",

    # delete_object
    "mfa": "MFA",
    "bypassGovernanceRetention": "BypassGovernanceRetention",
}

DEFAULT_DATE_KEYS = frozenset({
    "IfModifiedSince",
    "IfUnmodifiedSince",
    "ResponseExpires",
    "Expires",
    "ObjectLockRetainUntilDate",
})

DEFAULT_BOOLEAN_KEYS = frozenset({
    "ObjectLockEnabledForBucket",
    "BucketKeyEnabled",
})


@dataclass(frozen=True)
class MappingSnapshot:
    """One consistent view of the mapping table and the conversion registry"""
    table: Dict[str, str]
    date_keys: FrozenSet[str]
    boolean_keys: FrozenSet[str]

    def conversion_for(self, target_key: str) -> Optional[ConversionKind]:
        if target_key in self.date_keys:
            return ConversionKind.DATE
        if target_key in self.boolean_keys:
            return ConversionKind.BOOLEAN
        return None


class MappingConfig:
    """
    Mapping table plus conversion registry.

    The whole state lives in one immutable MappingSnapshot. extend() builds a
    new snapshot under a lock and swaps it in with a single assignment, so a
    concurrent map() sees either the old table or the new one, never a mix.
    """

    def __init__(
        self,
        table: Optional[Dict[str, str]] = None,
        date_keys: Iterable[str] = (),
        boolean_keys: Iterable[str] = ()
    ):
        date_keys = frozenset(date_keys)
        self._snapshot = MappingSnapshot(
            table=dict(table or {}),
            date_keys=date_keys,
            boolean_keys=frozenset(boolean_keys) - date_keys,
        )
        self._lock = threading.Lock()

    @classmethod
    def default(cls) -> "MappingConfig":
        """Fresh copy of the built-in S3 table"""
        return cls(
            table=DEFAULT_MAPPINGS,
            date_keys=DEFAULT_DATE_KEYS,
            boolean_keys=DEFAULT_BOOLEAN_KEYS,
        )

    @property
    def snapshot(self) -> MappingSnapshot:
        return self._snapshot

    @property
    def table(self) -> Dict[str, str]:
        return self._snapshot.table

    @property
    def date_keys(self) -> FrozenSet[str]:
        return self._snapshot.date_keys

    @property
    def boolean_keys(self) -> FrozenSet[str]:
        return self._snapshot.boolean_keys

    def extend(
        self,
        source_key: str,
        target_key: str,
        kind: Optional[Union[ConversionKind, str]] = None
    ):
        """
        Register (or overwrite) a mapping and optionally its conversion kind.

        Args:
            source_key: Parameter name as produced by the LLM (e.g. "newParam")
            target_key: Target path ("NewParam" or "Parent.Child")
            kind: ConversionKind (or "date" / "boolean") for the target key
        """
        kind = ConversionKind(kind) if kind is not None else None

        with self._lock:
            current = self._snapshot
            table = dict(current.table)
            table[source_key] = target_key
            date_keys = set(current.date_keys)
            boolean_keys = set(current.boolean_keys)

            if kind is ConversionKind.DATE:
                date_keys.add(target_key)
                boolean_keys.discard(target_key)
            elif kind is ConversionKind.BOOLEAN:
                boolean_keys.add(target_key)
                date_keys.discard(target_key)

            self._snapshot = MappingSnapshot(
                table=table,
                date_keys=frozenset(date_keys),
                boolean_keys=frozenset(boolean_keys),
            )

    def conversion_for(self, target_key: str) -> Optional[ConversionKind]:
        return self._snapshot.conversion_for(target_key)


class ParameterMapper:
    """
    Maps AI-extracted parameters onto S3 API parameters.

    Key Design Principles:
    1. Known keys always win over the heuristic (explicit table)
    2. Unknown keys are never dropped (capitalize-first-letter fallback)
    3. Only flat targets are type-converted
    4. Total over its input: nothing raises except an unparseable date
    """

    def __init__(self, config: Optional[MappingConfig] = None):
        """
        Initialize parameter mapper.

        Args:
            config: Mapping configuration (uses MappingConfig.default() if None)
        """
        self.config = config if config is not None else MappingConfig.default()
        self.logger = logging.getLogger(self.__class__.__name__)

    def map(self, params: Optional[ParameterMap]) -> Dict[str, Any]:
        """
        Map AI parameters to S3 API parameters.

        Args:
            params: Parameters extracted by the LLM (never modified)

        Returns:
            NormalizedOutput: flat dict with at most one level of nesting
        """
        result: Dict[str, Any] = {}
        unmapped: List[str] = []

        # One snapshot per call
        snapshot = self.config.snapshot

        self.logger.debug(f"Mapping input keys: {list((params or {}).keys())}")

        for key, value in (params or {}).items():
            if value is None:
                continue

            target = snapshot.table.get(key)
            if target is None:
                fallback_key = self.fallback_key(key)
                result[fallback_key] = value
                unmapped.append(fallback_key)
                continue

            if "." in target:
                self._set_nested(result, target, value)
            else:
                result[target] = self._convert(snapshot, target, value)

        self.logger.debug(f"Mapping output keys: {list(result.keys())}")
        if unmapped:
            self.logger.debug(f"Unmapped parameters (fallback): {unmapped}")

        return result

    def convert(self, target_key: str, value: Any) -> Any:
        """
        Convert a value for a flat target key.

        Date targets are parsed into datetimes (parse errors propagate),
        boolean targets are True only for True or the exact string "true".
        """
        return self._convert(self.config.snapshot, target_key, value)

    def _convert(self, snapshot: MappingSnapshot, target_key: str, value: Any) -> Any:
        kind = snapshot.conversion_for(target_key)

        if kind is ConversionKind.DATE:
            return self._to_datetime(value)

        if kind is ConversionKind.BOOLEAN:
            return value is True or value == "true"

        return value

    def extend(
        self,
        source_key: str,
        target_key: str,
        kind: Optional[Union[ConversionKind, str]] = None
    ):
        """Add a new parameter mapping at runtime"""
        self.config.extend(source_key, target_key, kind)
        self.logger.info(f"Added parameter mapping: {source_key} -> {target_key}")

    @staticmethod
    def fallback_key(key: str) -> str:
        """camelCase -> PascalCase (first character only)"""
        return key[:1].upper() + key[1:]

    def _set_nested(self, result: Dict[str, Any], target: str, value: Any):
        """Handle nested targets like CreateBucketConfiguration.LocationConstraint"""
        parts = target.split(".")
        if len(parts) != 2:
            self.logger.warning(
                f"Skipping target '{target}': only parent.child nesting is supported"
            )
            return

        parent, child = parts
        existing = result.get(parent)
        # Copy so caller-supplied dicts are never written into
        nested = dict(existing) if isinstance(existing, dict) else {}
        nested[child] = value
        result[parent] = nested

    @staticmethod
    def _to_datetime(value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value, tz=timezone.utc)

        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
