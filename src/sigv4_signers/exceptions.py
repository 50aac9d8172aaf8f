"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""


class SigV4Warning(UserWarning): ...


class BaseSigV4Exception(Exception):
    """Top-level exception to capture signing-related errors."""

    ...


class MissingRequiredHeaderException(BaseSigV4Exception, ValueError):
    """A header the signing algorithm depends on is absent from the request."""

    def __init__(self, header_name: str):
        self.header_name = header_name
        super().__init__(
            f"Request cannot be signed without having the {header_name} header"
        )
