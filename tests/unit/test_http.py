"""
Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
SPDX-License-Identifier: Apache-2.0
"""

from copy import deepcopy

import pytest

from sigv4_signers import URI, AWSRequest, Field, Fields


class TestField:
    def test_as_string(self):
        field = Field(name="Accept", values=["text/html", "application/json"])
        assert field.as_string() == "text/html, application/json"
        assert field.as_string(delimiter=",") == "text/html,application/json"

    def test_add_set_remove(self):
        field = Field(name="X-Thing")
        field.add("a")
        field.add("b")
        field.add("a")
        field.remove("a")
        assert field.values == ["b"]
        field.set(["c", "d"])
        assert field.values == ["c", "d"]


class TestFields:
    def test_lookup_is_case_insensitive(self):
        fields = Fields([Field(name="X-Amz-Date", values=["20150830T123600Z"])])
        assert "x-amz-date" in fields
        assert "X-AMZ-DATE" in fields
        assert fields["x-AMZ-date"].name == "X-Amz-Date"
        assert 42 not in fields

    def test_construction_merges_names_differing_in_case(self):
        fields = Fields(
            [
                Field(name="My-Header", values=["a"]),
                Field(name="my-header", values=["b", "c"]),
            ]
        )
        assert len(fields) == 1
        assert fields["MY-HEADER"].values == ["a", "b", "c"]
        assert fields["my-header"].name == "My-Header"

    def test_construction_merges_names_differing_in_whitespace(self):
        fields = Fields(
            [
                Field(name="X-Custom", values=["a"]),
                Field(name=" x-custom ", values=["b"]),
            ]
        )
        assert len(fields) == 1
        assert fields["x-custom"].values == ["a", "b"]
        assert " X-CUSTOM" in fields

    def test_construction_does_not_share_values(self):
        field = Field(name="My-Header", values=["a"])
        fields = Fields([field])
        fields.extend(Field(name="my-header", values=["b"]))
        assert field.values == ["a"]

    def test_set_field_replaces(self):
        fields = Fields([Field(name="Authorization", values=["old"])])
        fields.set_field(Field(name="authorization", values=["new"]))
        assert len(fields) == 1
        assert fields["Authorization"].values == ["new"]

    def test_remove_field(self):
        fields = Fields([Field(name="Host", values=["example.com"])])
        fields.remove_field("HOST")
        assert "host" not in fields
        with pytest.raises(KeyError):
            fields.get_field("host")

    def test_equality_and_copy(self):
        fields = Fields([Field(name="Host", values=["example.com"])])
        copied = deepcopy(fields)
        assert copied == fields
        copied.set_field(Field(name="Authorization", values=["sig"]))
        assert copied != fields
        assert "authorization" not in fields


class TestURI:
    @pytest.mark.parametrize(
        "uri, expected",
        [
            (URI(host="example.com"), "https://example.com/"),
            (
                URI(host="example.com", port=8000, scheme="http", path="/a%20b"),
                "http://example.com:8000/a%20b",
            ),
            (
                URI(host="example.com", path="/p", query="a=1", fragment="top"),
                "https://example.com/p?a=1#top",
            ),
        ],
    )
    def test_build(self, uri: URI, expected: str):
        assert uri.build() == expected

    def test_netloc(self):
        assert URI(host="127.0.0.1", port=8000).netloc == "127.0.0.1:8000"
        assert URI(host="127.0.0.1").netloc == "127.0.0.1"


class TestAWSRequest:
    def test_from_url(self):
        request = AWSRequest.from_url(
            "POST",
            "http://localhost:9000/bucket//key%20name?b=2&a=1#frag",
            headers={"X-Amz-Date": "20150830T123600Z", "X-Multi": ["1", "2"]},
            body=b"data",
        )
        assert request.method == "POST"
        assert request.destination == URI(
            scheme="http",
            host="localhost",
            port=9000,
            path="/bucket//key%20name",
            query="b=2&a=1",
            fragment="frag",
        )
        assert request.fields["x-multi"].values == ["1", "2"]
        assert request.fields["x-amz-date"].as_string() == "20150830T123600Z"
        assert request.body == b"data"

    def test_from_url_converts_scalar_header_values(self):
        request = AWSRequest.from_url(
            "PUT",
            "https://example.amazonaws.com/key",
            headers={"Content-Length": 5, "X-Raw": b"raw", "X-Ids": (1, 2)},
        )
        assert request.fields["content-length"].values == ["5"]
        assert request.fields["x-raw"].values == ["raw"]
        assert request.fields["x-ids"].values == ["1", "2"]

    def test_from_url_without_path_or_query(self):
        request = AWSRequest.from_url("GET", "https://example.amazonaws.com")
        assert request.destination.path is None
        assert request.destination.query is None
        assert len(request.fields) == 0

    def test_from_url_requires_host(self):
        with pytest.raises(ValueError):
            AWSRequest.from_url("GET", "/relative/path")
