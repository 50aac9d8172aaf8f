"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from collections.abc import Iterable
from copy import deepcopy
from dataclasses import replace
from hashlib import sha256
import hmac
import io
import logging
import re
from urllib.parse import parse_qsl, quote
import warnings

from ._http import AWSRequest, Field, RequestBody
from ._identity import SigningIdentity, SigningScope
from .exceptions import MissingRequiredHeaderException, SigV4Warning
from .interfaces.io import Seekable

logger = logging.getLogger(__name__)

SIGNING_ALGORITHM: str = "AWS4-HMAC-SHA256"
SIGNING_TERMINATOR: str = "aws4_request"
DATE_HEADER: str = "x-amz-date"
EMPTY_SHA256_HASH = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

_CONSECUTIVE_SLASHES = re.compile(r"/+")


class SigV4Signer:
    """
    Request signer for applying the AWS Signature Version 4 algorithm.

    The signer is bound to a region and service at construction. Both may be
    omitted, in which case the credential scope and signing key are derived
    from the date alone.
    """

    def __init__(
        self,
        region: str | None = None,
        service: str | None = None,
        *,
        scope: SigningScope | None = None,
    ):
        if scope is None:
            scope = SigningScope(region=region, service=service)
        elif region is not None or service is not None:
            raise ValueError(
                "Pass either region and service or a SigningScope, not both."
            )
        self._scope = scope

    @property
    def scope(self) -> SigningScope:
        return self._scope

    def sign(
        self,
        request: AWSRequest,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ) -> AWSRequest:
        """Sign a copy of the request with the given credentials.

        When either credential is missing the request is returned untouched so
        that anonymous requests can pass through the same code path.

        :param request: An AWSRequest carrying an `x-amz-date` header.
        :param access_key_id: The access key id placed in the credential.
        :param secret_access_key: The secret used to derive the signing key.
        :raises MissingRequiredHeaderException: If `x-amz-date` isn't set.
        """
        if access_key_id is None or secret_access_key is None:
            logger.debug("No credentials supplied, skipping request signing.")
            return request

        identity = SigningIdentity(
            access_key_id=access_key_id, secret_access_key=secret_access_key
        )
        # Fail before any signing work if the date is missing.
        self._amz_date(request=request)

        body, body_for_new_request = self._read_body(body=request.body)
        new_request = self._generate_new_request(
            request=request, body=body_for_new_request
        )

        # Construct core signing components
        canonical_request = self._canonical_request(request=new_request, body=body)
        logger.debug("CanonicalRequest:\n%s", canonical_request)
        string_to_sign = self.string_to_sign(
            canonical_request=canonical_request, request=new_request
        )
        logger.debug("StringToSign:\n%s", string_to_sign)
        signature = self._signature(
            string_to_sign=string_to_sign,
            secret_key=identity.secret_access_key,
            request=new_request,
        )
        logger.debug("Signature:\n%s", signature)

        credential_scope = self.credential_scope(request=new_request)
        credential = f"{identity.access_key_id}/{credential_scope}"
        authorization = self.generate_authorization_field(
            credential=credential,
            signed_headers=self._signed_header_names(request=new_request),
            signature=signature,
        )
        new_request.fields.set_field(authorization)

        return new_request

    def generate_authorization_field(
        self, *, credential: str, signed_headers: list[str], signature: str
    ) -> Field:
        """Generate the `Authorization` field.

        :param credential:
            Access key id followed by the credential scope, defined as:
                <access_key>/<date>[/<region>][/<service>]/aws4_request
        :param signed_headers:
            A list of the field names used in signing.
        :param signature:
            Final hash of the SigV4 signing algorithm generated from the
            canonical request and string to sign.
        """
        signed_headers_str = ";".join(signed_headers)
        auth_str = (
            f"{SIGNING_ALGORITHM} Credential={credential}, "
            f"SignedHeaders={signed_headers_str}, Signature={signature}"
        )
        return Field(name="Authorization", values=[auth_str])

    def canonical_request(self, *, request: AWSRequest) -> str:
        """The canonical request is a standardized string laying out the components
        used in the SigV4 signing algorithm. This is useful to quickly compare inputs
        to find signature mismatches and unintended variances.

        The canonical request is defined as:
            <HTTPMethod>\n
            <CanonicalURI>\n
            <CanonicalQueryString>\n
            <CanonicalHeaders>\n
            \n
            <SignedHeaders>\n
            <HashedPayload>

        The request body is read without consuming it. One-shot iterable bodies
        can only be read through `sign`, which buffers them onto the signed copy.

        :raises TypeError: If the request body is a one-shot iterable.
        """
        self._amz_date(request=request)
        body, _ = self._read_body(body=request.body, buffer_one_shot=False)
        return self._canonical_request(request=request, body=body)

    def _canonical_request(self, *, request: AWSRequest, body: bytes) -> str:
        canonical_fields = self._normalize_signing_fields(request=request)
        lines = (
            request.method,
            self._format_canonical_path(path=request.destination.path),
            self._format_canonical_query(query=request.destination.query),
            self._format_canonical_fields(fields=canonical_fields),
            "",
            ";".join(canonical_fields),
            self._format_canonical_payload(body=body),
        )
        return "\n".join(lines)

    def string_to_sign(self, *, canonical_request: str, request: AWSRequest) -> str:
        """The string to sign concatenates the formal identifier of the signing
        algorithm, the signing DateTime, the scope of the credentials, and a hash
        of the canonical request.

        The string to sign is defined as:
            Algorithm \n
            RequestDateTime \n
            CredentialScope  \n
            HashedCanonicalRequest
        """
        lines = (
            SIGNING_ALGORITHM,
            self._amz_date(request=request),
            self.credential_scope(request=request),
            sha256(canonical_request.encode()).hexdigest(),
        )
        return "\n".join(lines)

    def credential_scope(self, *, request: AWSRequest) -> str:
        # Scope format: <YYYYMMDD>[/<region>][/<service>]/aws4_request
        components = (
            self._short_date(request=request),
            *self._scope.components,
            SIGNING_TERMINATOR,
        )
        return "/".join(components)

    def signed_headers(self, *, request: AWSRequest) -> str:
        """The `;` separated list of every header name covered by the signature."""
        return ";".join(self._signed_header_names(request=request))

    def signing_key(self, *, secret_access_key: str, request: AWSRequest) -> bytes:
        """Derive the signing key scoped to the request date, region and service.

        DateKey              = HMAC-SHA256("AWS4"+"<SecretAccessKey>", "<YYYYMMDD>")
        DateRegionKey        = HMAC-SHA256(<DateKey>, "<aws-region>")
        DateRegionServiceKey = HMAC-SHA256(<DateRegionKey>, "<aws-service>")
        SigningKey           = HMAC-SHA256(<DateRegionServiceKey>, "aws4_request")

        The region and service steps are skipped when the signer wasn't
        configured with them.
        """
        key = self._hash(
            key=f"AWS4{secret_access_key}".encode(),
            value=self._short_date(request=request),
        )
        for component in (*self._scope.components, SIGNING_TERMINATOR):
            key = self._hash(key=key, value=component)
        return key

    def _signature(
        self, *, string_to_sign: str, secret_key: str, request: AWSRequest
    ) -> str:
        k_signing = self.signing_key(secret_access_key=secret_key, request=request)
        return self._hash(key=k_signing, value=string_to_sign).hex()

    def _hash(self, key: bytes, value: str) -> bytes:
        return hmac.new(key=key, msg=value.encode(), digestmod=sha256).digest()

    def _amz_date(self, *, request: AWSRequest) -> str:
        if DATE_HEADER not in request.fields:
            raise MissingRequiredHeaderException(DATE_HEADER)
        values = request.fields[DATE_HEADER].values
        if not values:
            raise MissingRequiredHeaderException(DATE_HEADER)
        return values[-1]

    def _short_date(self, *, request: AWSRequest) -> str:
        return self._amz_date(request=request)[0:8]

    def _generate_new_request(
        self, *, request: AWSRequest, body: RequestBody
    ) -> AWSRequest:
        # The body is shared rather than copied; streams are left where they
        # were found after hashing.
        return replace(request, fields=deepcopy(request.fields), body=body)

    def _read_body(
        self, *, body: RequestBody, buffer_one_shot: bool = True
    ) -> tuple[bytes, RequestBody]:
        """Read the full body without consuming it.

        Returns the body bytes and the body to attach to the signed request.
        One-shot iterables can't be rewound, so they are buffered and the buffer
        replaces them on the signed request.
        """
        if body is None:
            return b"", None
        if isinstance(body, str):
            return body.encode(), body
        if isinstance(body, bytes | bytearray):
            return bytes(body), body
        if isinstance(body, Seekable):
            position = body.tell()
            data = body.read()
            body.seek(position)
            return data, body
        if isinstance(body, list | tuple):
            return b"".join(body), body
        if not isinstance(body, Iterable):
            raise TypeError(
                "Unable to read request body for signing. Expected bytes, str, "
                f"a seekable stream or Iterable[bytes] but received {type(body)}."
            )
        if not buffer_one_shot:
            raise TypeError(
                "Request body is a one-shot iterable and can't be read without "
                "consuming it. Use sign(), or pass bytes or a seekable stream."
            )

        warnings.warn(
            "Request body is a one-shot iterable and was buffered into memory "
            "for signing. Send the signed request, not the original.",
            SigV4Warning,
        )
        buffer = io.BytesIO()
        for chunk in body:
            buffer.write(chunk)
        buffer.seek(0)
        return buffer.getvalue(), buffer

    def _format_canonical_path(self, *, path: str | None) -> str:
        if not path:
            return "/"
        return _CONSECUTIVE_SLASHES.sub("/", path)

    def _format_canonical_query(self, *, query: str | None) -> str:
        if not query:
            return ""

        query_params = parse_qsl(qs=query, keep_blank_values=True)
        query_parts = (
            (_rfc3986_encode(key), _rfc3986_encode(value))
            for key, value in query_params
        )
        # key-value pairs must be in sorted order for their encoded forms.
        return "&".join(f"{key}={value}" for key, value in sorted(query_parts))

    def _normalize_signing_fields(self, *, request: AWSRequest) -> dict[str, str]:
        # Every field is signed. Values are trimmed and joined before sorting.
        normalized_fields = {
            field.name.strip().lower(): ",".join(
                " ".join(value.split()) for value in field.values
            )
            for field in request.fields
        }
        return dict(sorted(normalized_fields.items()))

    def _signed_header_names(self, *, request: AWSRequest) -> list[str]:
        return list(self._normalize_signing_fields(request=request))

    def _format_canonical_fields(self, *, fields: dict[str, str]) -> str:
        return "\n".join(f"{key}:{value}" for key, value in fields.items())

    def _format_canonical_payload(self, *, body: bytes) -> str:
        if not body:
            return EMPTY_SHA256_HASH
        text = body.decode("utf-8", errors="replace")
        return sha256(text.encode()).hexdigest()


def _rfc3986_encode(value: str) -> str:
    """Percent-encode everything except the RFC 3986 unreserved characters.

    Spaces become `%20` and `*` becomes `%2A`; `~` is left as is.
    """
    return quote(string=value, safe="")
