"""Well-known deprecations with version metadata.

Versions are Go 1.x minor versions. An entry records the version a symbol was
deprecated in and when an alternative became usable, which decides whether a
use is worth reporting for the configured target version.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

NEVER_USE = -1
USE_NO_LONGER = -2


class AlternativePolicy(str, Enum):
    """How the availability of an alternative gates reporting."""

    NEVER_USE = "never"
    USE_NO_LONGER = "no-longer"
    SINCE_VERSION = "since-version"


@dataclass(frozen=True)
class KnownDeprecation:
    qualified_name: str
    deprecated_since: int
    policy: AlternativePolicy
    alternative_since: Optional[int] = None

    def __post_init__(self) -> None:
        if self.policy is AlternativePolicy.SINCE_VERSION:
            if self.alternative_since is None or self.alternative_since < 0:
                raise ValueError(
                    f"{self.qualified_name}: alternative version required for since-version policy"
                )
        elif self.alternative_since is not None:
            raise ValueError(
                f"{self.qualified_name}: {self.policy.value} policy takes no alternative version"
            )

    @classmethod
    def from_versions(cls, name: str, deprecated_since: int, alternative: int) -> "KnownDeprecation":
        """Build an entry from the compact encoding with negative sentinels."""
        if alternative == NEVER_USE:
            return cls(name, deprecated_since, AlternativePolicy.NEVER_USE)
        if alternative == USE_NO_LONGER:
            return cls(name, deprecated_since, AlternativePolicy.USE_NO_LONGER)
        if alternative < 0:
            raise ValueError(f"{name}: unhandled alternative version {alternative}")
        return cls(name, deprecated_since, AlternativePolicy.SINCE_VERSION, alternative)

    def reportable_at(self, target_version: int) -> bool:
        """Return True when a use should be reported for ``target_version``."""
        if self.policy is AlternativePolicy.NEVER_USE:
            # Insecure or inherently broken APIs, flagged for every target.
            return True
        if self.policy is AlternativePolicy.USE_NO_LONGER:
            return target_version >= self.deprecated_since
        # The first available alternative counts, not the deprecation itself.
        # __post_init__ guarantees the version is set for this policy.
        return self.alternative_since is not None and target_version >= self.alternative_since


# Compact table of standard library deprecations: name -> (deprecated, alternative).
_STDLIB_DEPRECATIONS: Dict[str, Tuple[int, int]] = {
    "go/build.AllowBinary": (7, 7),
    "(archive/zip.FileHeader).CompressedSize": (1, 1),
    "(archive/zip.FileHeader).UncompressedSize": (1, 1),
    "(archive/zip.FileHeader).ModifiedTime": (10, 10),
    "(archive/zip.FileHeader).ModifiedDate": (10, 10),
    "(*archive/zip.FileHeader).ModTime": (10, 10),
    "(*archive/zip.FileHeader).SetModTime": (10, 10),
    "(go/doc.Package).Bugs": (1, 1),
    "os.SEEK_SET": (7, 7),
    "os.SEEK_CUR": (7, 7),
    "os.SEEK_END": (7, 7),
    "(net.Dialer).Cancel": (7, 7),
    "runtime.CPUProfile": (9, 0),
    "compress/flate.ReadError": (6, USE_NO_LONGER),
    "compress/flate.WriteError": (6, USE_NO_LONGER),
    "path/filepath.HasPrefix": (0, NEVER_USE),
    "(net/http.Transport).Dial": (7, 7),
    "(*net/http.Transport).CancelRequest": (6, 5),
    "net/http.ErrWriteAfterFlush": (7, USE_NO_LONGER),
    "net/http.ErrHeaderTooLong": (8, USE_NO_LONGER),
    "net/http.ErrShortBody": (8, USE_NO_LONGER),
    "net/http.ErrMissingContentLength": (8, USE_NO_LONGER),
    "net/http/httputil.ErrPersistEOF": (0, USE_NO_LONGER),
    "net/http/httputil.ErrClosed": (0, USE_NO_LONGER),
    "net/http/httputil.ErrPipeline": (0, USE_NO_LONGER),
    "net/http/httputil.ServerConn": (0, 0),
    "net/http/httputil.NewServerConn": (0, 0),
    "net/http/httputil.ClientConn": (0, 0),
    "net/http/httputil.NewClientConn": (0, 0),
    "net/http/httputil.NewProxyClientConn": (0, 0),
    "(net/http.Request).Cancel": (7, 7),
    "(text/template/parse.PipeNode).Line": (1, USE_NO_LONGER),
    "(text/template/parse.ActionNode).Line": (1, USE_NO_LONGER),
    "(text/template/parse.BranchNode).Line": (1, USE_NO_LONGER),
    "(text/template/parse.TemplateNode).Line": (1, USE_NO_LONGER),
    "database/sql/driver.ColumnConverter": (9, 9),
    "database/sql/driver.Execer": (8, 8),
    "database/sql/driver.Queryer": (8, 8),
    "(database/sql/driver.Conn).Begin": (8, 8),
    "(database/sql/driver.Stmt).Exec": (8, 8),
    "(database/sql/driver.Stmt).Query": (8, 8),
    "syscall.StringByteSlice": (1, 1),
    "syscall.StringBytePtr": (1, 1),
    "syscall.StringSlicePtr": (1, 1),
    "syscall.StringToUTF16": (1, 1),
    "syscall.StringToUTF16Ptr": (1, 1),
    "(*regexp.Regexp).Copy": (12, USE_NO_LONGER),
    "(archive/tar.Header).Xattrs": (10, 10),
    "archive/tar.TypeRegA": (11, 1),
    "go/types.NewInterface": (11, 11),
    "(*go/types.Interface).Embedded": (11, 11),
    "go/importer.For": (12, 12),
    "encoding/json.InvalidUTF8Error": (2, USE_NO_LONGER),
    "encoding/json.UnmarshalFieldError": (2, USE_NO_LONGER),
    "encoding/csv.ErrTrailingComma": (2, USE_NO_LONGER),
    "(encoding/csv.Reader).TrailingComma": (2, USE_NO_LONGER),
    "(net.Dialer).DualStack": (12, 12),
    "net/http.ErrUnexpectedTrailer": (12, USE_NO_LONGER),
    "net/http.CloseNotifier": (11, 7),
    "net/http.ProtocolError": (8, USE_NO_LONGER),
    "(crypto/x509.CertificateRequest).Attributes": (5, 3),
    "(*crypto/rc4.Cipher).Reset": (12, NEVER_USE),
    "(net/http/httptest.ResponseRecorder).HeaderMap": (11, 7),
    "image.ZP": (13, 0),
    "image.ZR": (13, 0),
    "(*debug/gosym.LineTable).LineToPC": (2, 2),
    "(*debug/gosym.LineTable).PCToLine": (2, 2),
    "crypto/tls.VersionSSL30": (13, NEVER_USE),
    "(crypto/tls.Config).NameToCertificate": (14, USE_NO_LONGER),
    "(*crypto/tls.Config).BuildNameToCertificate": (14, USE_NO_LONGER),
    "(crypto/tls.Config).SessionTicketKey": (16, 5),
    "(crypto/tls.ConnectionState).NegotiatedProtocolIsMutual": (16, NEVER_USE),
    "(crypto/tls.ConnectionState).TLSUnique": (16, NEVER_USE),
    "image/jpeg.Reader": (4, NEVER_USE),
    "io/ioutil.NopCloser": (16, 16),
    "io/ioutil.ReadAll": (16, 16),
    "io/ioutil.ReadFile": (16, 16),
    "io/ioutil.WriteFile": (16, 16),
    "io/ioutil.ReadDir": (16, 16),
    "io/ioutil.Discard": (16, 16),
    "io/ioutil.TempFile": (17, 16),
    "io/ioutil.TempDir": (17, 16),
}


class KnowledgeTable(Mapping[str, KnownDeprecation]):
    """Read-only lookup of well-known deprecations by qualified name."""

    def __init__(self, entries: Iterable[KnownDeprecation] = ()) -> None:
        self._entries: Dict[str, KnownDeprecation] = {
            entry.qualified_name: entry for entry in entries
        }

    @classmethod
    def stdlib(cls) -> "KnowledgeTable":
        return cls(
            KnownDeprecation.from_versions(name, deprecated, alternative)
            for name, (deprecated, alternative) in _STDLIB_DEPRECATIONS.items()
        )

    def with_overrides(self, entries: Iterable[KnownDeprecation]) -> "KnowledgeTable":
        """Return a new table where ``entries`` add to or replace existing ones."""
        merged = dict(self._entries)
        for entry in entries:
            merged[entry.qualified_name] = entry
        return KnowledgeTable(merged.values())

    def latest_version(self) -> int:
        """Return the newest version referenced by any entry, 0 when empty."""
        versions = [entry.deprecated_since for entry in self._entries.values()]
        versions.extend(
            entry.alternative_since
            for entry in self._entries.values()
            if entry.alternative_since is not None
        )
        return max(versions, default=0)

    def __getitem__(self, name: str) -> KnownDeprecation:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "AlternativePolicy",
    "KnowledgeTable",
    "KnownDeprecation",
    "NEVER_USE",
    "USE_NO_LONGER",
]
