"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0

SigV4 Signers provides stand-alone AWS Signature Version 4 request signing for
use with HTTP tools such as AioHTTP, Requests, urllib3, etc.
"""

from __future__ import annotations

from ._http import URI, AWSRequest, Field, Fields
from ._identity import SigningIdentity, SigningScope
from ._version import __version__
from .exceptions import MissingRequiredHeaderException
from .signers import SigV4Signer

__license__ = "Apache-2.0"
__version__ = __version__

__all__ = (
    "AWSRequest",
    "Field",
    "Fields",
    "MissingRequiredHeaderException",
    "SigV4Signer",
    "SigningIdentity",
    "SigningScope",
    "URI",
)
