"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from dataclasses import dataclass, field


@dataclass(kw_only=True, frozen=True)
class SigningIdentity:
    access_key_id: str
    secret_access_key: str = field(repr=False)


@dataclass(kw_only=True, frozen=True)
class SigningScope:
    """Region and service a signer derives its keys for.

    Either part may be left unset. Absent parts are dropped from both the
    credential scope and the key derivation chain, which allows signing for
    SigV4-compatible endpoints that don't use a region or service.
    """

    region: str | None = None
    service: str | None = None

    @property
    def components(self) -> tuple[str, ...]:
        """The configured scope parts in signing order."""
        return tuple(part for part in (self.region, self.service) if part is not None)
