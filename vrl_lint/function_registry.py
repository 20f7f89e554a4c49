"""
VRL Function Registry

Structured data for the Vector Remap Language standard library.  Each entry
provides the function name, category, fallibility, ordered parameters, return
type, a one-line description and an optional example.

The registry is built once per process and shared read-only by the diagnostic
engine and the completion / hover providers.  Extra functions (e.g. from a
custom VRL build) can be loaded from JSON and merged into a new registry.
"""

import json
import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


class FunctionCategory(str, Enum):
    PARSE = "parse"
    COERCE = "coerce"
    CONVERT = "convert"
    STRING = "string"
    CODEC = "codec"
    HASH = "hash"
    TYPE = "type"
    OBJECT = "object"
    ARRAY = "array"
    TIMESTAMP = "timestamp"
    IP = "ip"
    RANDOM = "random"
    EVENT = "event"
    DEBUG = "debug"
    ENUMERATE = "enumerate"


class FunctionParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str                          # "string" | "int" | "any" | "regex" | ...
    optional: bool = False


class FunctionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    category: FunctionCategory
    fallible: bool
    parameters: Tuple[FunctionParameter, ...] = ()
    return_type: str
    description: str
    example: Optional[str] = None

    @property
    def required_parameters(self) -> Tuple[FunctionParameter, ...]:
        return tuple(p for p in self.parameters if not p.optional)


def _p(name: str, type_: str, optional: bool = False) -> FunctionParameter:
    return FunctionParameter(name=name, type=type_, optional=optional)


# ═══════════════════════════════════════════════════════════════════════
#  Built-in dataset
# ═══════════════════════════════════════════════════════════════════════

_BUILTINS: List[FunctionSpec] = []

def _add(spec: FunctionSpec):
    _BUILTINS.append(spec)

# ───────────────────────────────────────────────────────────────────────
#  Parse functions (all fallible)
# ───────────────────────────────────────────────────────────────────────

_add(FunctionSpec(
    name="parse_json", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("max_depth", "int", True)],
    return_type="any",
    description="Parses a JSON string into a VRL value.",
    example=". = parse_json!(.message)",
))
_add(FunctionSpec(
    name="parse_syslog", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses a syslog message according to RFC 3164 and RFC 5424.",
    example=". = parse_syslog!(.message)",
))
_add(FunctionSpec(
    name="parse_regex", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("pattern", "regex"), _p("numeric_groups", "bool", True)],
    return_type="object",
    description="Parses a string with a regular expression and returns the named capture groups.",
    example=". = parse_regex!(.message, r'^(?P<ip>\\d+\\.\\d+\\.\\d+\\.\\d+)')",
))
_add(FunctionSpec(
    name="parse_regex_all", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("pattern", "regex"), _p("numeric_groups", "bool", True)],
    return_type="array",
    description="Parses a string with a regular expression and returns every match.",
    example=".matches = parse_regex_all!(.message, r'(?P<num>\\d+)')",
))
_add(FunctionSpec(
    name="parse_key_value", category=FunctionCategory.PARSE, fallible=True,
    parameters=[
        _p("value", "string"), _p("key_value_delimiter", "string", True),
        _p("field_delimiter", "string", True),
    ],
    return_type="object",
    description="Parses key-value pairs from a string.",
    example=". = parse_key_value!(.message)",
))
_add(FunctionSpec(
    name="parse_csv", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("delimiter", "string", True)],
    return_type="array",
    description="Parses a single CSV formatted row.",
    example=".fields = parse_csv!(.message)",
))
_add(FunctionSpec(
    name="parse_timestamp", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("format", "string")],
    return_type="timestamp",
    description="Parses a timestamp string using the given strptime format.",
    example='.timestamp = parse_timestamp!(.time, "%Y-%m-%d %H:%M:%S")',
))
_add(FunctionSpec(
    name="parse_cef", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("message", "string"), _p("transform_fields", "bool", True)],
    return_type="object",
    description="Parses a Common Event Format (CEF) message.",
    example=". = parse_cef!(.message)",
))
_add(FunctionSpec(
    name="parse_apache_log", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("format", "string"), _p("timestamp_format", "string", True)],
    return_type="object",
    description="Parses an Apache access or error log line.",
    example='. = parse_apache_log!(.message, format: "common")',
))
_add(FunctionSpec(
    name="parse_nginx_log", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("format", "string"), _p("timestamp_format", "string", True)],
    return_type="object",
    description="Parses an Nginx access or error log line.",
    example='. = parse_nginx_log!(.message, "combined")',
))
_add(FunctionSpec(
    name="parse_common_log", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("timestamp_format", "string", True)],
    return_type="object",
    description="Parses a line in the Common Log Format.",
))
_add(FunctionSpec(
    name="parse_aws_alb_log", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses an AWS Application Load Balancer access log line.",
))
_add(FunctionSpec(
    name="parse_aws_vpc_flow_log", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("format", "string", True)],
    return_type="object",
    description="Parses an AWS VPC flow log record.",
))
_add(FunctionSpec(
    name="parse_aws_cloudwatch_log_subscription_message", category=FunctionCategory.PARSE,
    fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses an AWS CloudWatch Logs subscription message.",
))
_add(FunctionSpec(
    name="parse_duration", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("unit", "string")],
    return_type="float",
    description="Parses a duration string such as '1.5s' into the given unit.",
    example='.seconds = parse_duration!(.took, "s")',
))
_add(FunctionSpec(
    name="parse_glog", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses a glog (Google logging library) line.",
))
_add(FunctionSpec(
    name="parse_grok", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("pattern", "string")],
    return_type="object",
    description="Parses a string with a grok pattern.",
    example='. = parse_grok!(.message, "%{TIMESTAMP_ISO8601:timestamp} %{GREEDYDATA:message}")',
))
_add(FunctionSpec(
    name="parse_int", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("base", "int", True)],
    return_type="int",
    description="Parses a string as an integer in the given base.",
    example='.code = parse_int!(.hex, 16)',
))
_add(FunctionSpec(
    name="parse_klog", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses a Kubernetes klog line.",
))
_add(FunctionSpec(
    name="parse_linux_authorization", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses a Linux authorization (auth.log) line.",
))
_add(FunctionSpec(
    name="parse_logfmt", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses a logfmt formatted string.",
    example=". = parse_logfmt!(.message)",
))
_add(FunctionSpec(
    name="parse_query_string", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses a URL query string into an object.",
))
_add(FunctionSpec(
    name="parse_ruby_hash", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses a Ruby hash literal.",
))
_add(FunctionSpec(
    name="parse_tokens", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="array",
    description="Splits a string into whitespace-separated tokens, honouring quotes and brackets.",
))
_add(FunctionSpec(
    name="parse_url", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("default_known_ports", "bool", True)],
    return_type="object",
    description="Parses a URL into its components.",
    example=".url = parse_url!(.request_url)",
))
_add(FunctionSpec(
    name="parse_user_agent", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string"), _p("mode", "string", True)],
    return_type="object",
    description="Parses a user agent string into browser, OS and device fields.",
))
_add(FunctionSpec(
    name="parse_xml", category=FunctionCategory.PARSE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="object",
    description="Parses an XML document into an object.",
))

# ───────────────────────────────────────────────────────────────────────
#  Coercion / conversion
# ───────────────────────────────────────────────────────────────────────

_add(FunctionSpec(
    name="to_int", category=FunctionCategory.COERCE, fallible=True,
    parameters=[_p("value", "any")],
    return_type="int",
    description="Coerces a value into an integer.",
    example=".status = to_int!(.status)",
))
_add(FunctionSpec(
    name="to_float", category=FunctionCategory.COERCE, fallible=True,
    parameters=[_p("value", "any")],
    return_type="float",
    description="Coerces a value into a float.",
    example=".duration = to_float!(.duration)",
))
_add(FunctionSpec(
    name="to_bool", category=FunctionCategory.COERCE, fallible=True,
    parameters=[_p("value", "any")],
    return_type="bool",
    description="Coerces a value into a boolean.",
))
_add(FunctionSpec(
    name="to_string", category=FunctionCategory.COERCE, fallible=False,
    parameters=[_p("value", "any")],
    return_type="string",
    description="Converts any value to its string representation.",
    example=".string_value = to_string(.numeric_field)",
))
_add(FunctionSpec(
    name="to_regex", category=FunctionCategory.COERCE, fallible=True,
    parameters=[_p("value", "string")],
    return_type="regex",
    description="Coerces a string into a regular expression.",
))
_add(FunctionSpec(
    name="to_timestamp", category=FunctionCategory.COERCE, fallible=True,
    parameters=[_p("value", "any"), _p("unit", "string", True)],
    return_type="timestamp",
    description="Coerces a value into a timestamp.",
))
_add(FunctionSpec(
    name="to_unix_timestamp", category=FunctionCategory.CONVERT, fallible=False,
    parameters=[_p("value", "timestamp"), _p("unit", "string", True)],
    return_type="int",
    description="Converts a timestamp into a Unix timestamp in the given unit.",
    example=".epoch = to_unix_timestamp(now())",
))
_add(FunctionSpec(
    name="to_syslog_level", category=FunctionCategory.CONVERT, fallible=True,
    parameters=[_p("value", "int")],
    return_type="string",
    description="Converts a syslog severity number into a level name.",
))
_add(FunctionSpec(
    name="to_syslog_severity", category=FunctionCategory.CONVERT, fallible=True,
    parameters=[_p("value", "string")],
    return_type="int",
    description="Converts a syslog level name into a severity number.",
))
_add(FunctionSpec(
    name="to_syslog_facility", category=FunctionCategory.CONVERT, fallible=True,
    parameters=[_p("value", "int")],
    return_type="string",
    description="Converts a syslog facility code into its name.",
))

# ───────────────────────────────────────────────────────────────────────
#  String functions
# ───────────────────────────────────────────────────────────────────────

_add(FunctionSpec(
    name="contains", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string"), _p("substring", "string"), _p("case_sensitive", "bool", True)],
    return_type="bool",
    description="Checks if a string contains the given substring.",
    example='if contains(.message, "error") { .level = "error" }',
))
_add(FunctionSpec(
    name="starts_with", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string"), _p("substring", "string"), _p("case_sensitive", "bool", True)],
    return_type="bool",
    description="Checks if a string starts with the given prefix.",
    example='if starts_with(.message, "ERROR") { .level = "error" }',
))
_add(FunctionSpec(
    name="ends_with", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string"), _p("substring", "string"), _p("case_sensitive", "bool", True)],
    return_type="bool",
    description="Checks if a string ends with the given suffix.",
))
_add(FunctionSpec(
    name="upcase", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("text", "string")],
    return_type="string",
    description="Converts a string to uppercase.",
    example=".upper_message = upcase(.message)",
))
_add(FunctionSpec(
    name="downcase", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("text", "string")],
    return_type="string",
    description="Converts a string to lowercase.",
    example=".lower_message = downcase(.message)",
))
_add(FunctionSpec(
    name="strip_whitespace", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Removes leading and trailing whitespace from a string.",
    example=".trimmed = strip_whitespace(.message)",
))
_add(FunctionSpec(
    name="strip_ansi_escape_codes", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Removes ANSI escape sequences from a string.",
))
_add(FunctionSpec(
    name="replace", category=FunctionCategory.STRING, fallible=False,
    parameters=[
        _p("value", "string"), _p("pattern", "string|regex"), _p("with", "string"),
        _p("count", "int", True),
    ],
    return_type="string",
    description="Replaces occurrences of a pattern in a string.",
    example='.message = replace(.message, "password", "****")',
))
_add(FunctionSpec(
    name="split", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string"), _p("pattern", "string|regex"), _p("limit", "int", True)],
    return_type="array",
    description="Splits a string on a pattern.",
    example='.parts = split(.path, "/")',
))
_add(FunctionSpec(
    name="join", category=FunctionCategory.STRING, fallible=True,
    parameters=[_p("value", "array"), _p("separator", "string", True)],
    return_type="string",
    description="Joins an array of strings into a single string.",
    example='.path = join!(.parts, "/")',
))
_add(FunctionSpec(
    name="slice", category=FunctionCategory.STRING, fallible=True,
    parameters=[_p("value", "string|array"), _p("start", "int"), _p("end", "int", True)],
    return_type="string|array",
    description="Returns a slice of a string or array.",
))
_add(FunctionSpec(
    name="truncate", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string"), _p("limit", "int"), _p("suffix", "string", True)],
    return_type="string",
    description="Truncates a string to the given number of characters.",
))
_add(FunctionSpec(
    name="strlen", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string")],
    return_type="int",
    description="Returns the number of UTF-8 characters in a string.",
))
_add(FunctionSpec(
    name="match", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string"), _p("pattern", "regex")],
    return_type="bool",
    description="Checks whether a string matches a regular expression.",
    example="if match(.message, r'^ERROR') { .level = \"error\" }",
))
_add(FunctionSpec(
    name="match_any", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string"), _p("patterns", "array")],
    return_type="bool",
    description="Checks whether a string matches any of the given regular expressions.",
))
_add(FunctionSpec(
    name="format_int", category=FunctionCategory.STRING, fallible=True,
    parameters=[_p("value", "int"), _p("base", "int", True)],
    return_type="string",
    description="Formats an integer as a string in the given base.",
))
_add(FunctionSpec(
    name="format_number", category=FunctionCategory.STRING, fallible=False,
    parameters=[
        _p("value", "int|float"), _p("scale", "int", True),
        _p("decimal_separator", "string", True), _p("grouping_separator", "string", True),
    ],
    return_type="string",
    description="Formats a number with the given precision and separators.",
))
_add(FunctionSpec(
    name="redact", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string|object|array"), _p("filters", "array")],
    return_type="string|object|array",
    description="Redacts sensitive data matching the given filters.",
    example='.message = redact(.message, filters: ["us_social_security_number"])',
))

# ───────────────────────────────────────────────────────────────────────
#  Codec functions
# ───────────────────────────────────────────────────────────────────────

_add(FunctionSpec(
    name="encode_base64", category=FunctionCategory.CODEC, fallible=False,
    parameters=[_p("value", "string"), _p("padding", "bool", True), _p("charset", "string", True)],
    return_type="string",
    description="Encodes a string to Base64.",
))
_add(FunctionSpec(
    name="decode_base64", category=FunctionCategory.CODEC, fallible=True,
    parameters=[_p("value", "string"), _p("charset", "string", True)],
    return_type="string",
    description="Decodes a Base64 string.",
    example=".decoded = decode_base64!(.encoded)",
))
_add(FunctionSpec(
    name="encode_percent", category=FunctionCategory.CODEC, fallible=False,
    parameters=[_p("value", "string"), _p("ascii_set", "string", True)],
    return_type="string",
    description="Percent-encodes a string.",
))
_add(FunctionSpec(
    name="decode_percent", category=FunctionCategory.CODEC, fallible=True,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Decodes a percent-encoded string.",
))
_add(FunctionSpec(
    name="encode_json", category=FunctionCategory.CODEC, fallible=False,
    parameters=[_p("value", "any"), _p("pretty", "bool", True)],
    return_type="string",
    description="Encodes a value as a JSON string.",
    example=".payload = encode_json(.)",
))
_add(FunctionSpec(
    name="encode_key_value", category=FunctionCategory.CODEC, fallible=True,
    parameters=[
        _p("value", "object"), _p("fields_ordering", "array", True),
        _p("key_value_delimiter", "string", True), _p("field_delimiter", "string", True),
    ],
    return_type="string",
    description="Encodes an object as key-value pairs.",
))
_add(FunctionSpec(
    name="encode_logfmt", category=FunctionCategory.CODEC, fallible=True,
    parameters=[_p("value", "object"), _p("fields_ordering", "array", True)],
    return_type="string",
    description="Encodes an object as a logfmt string.",
))
_add(FunctionSpec(
    name="encode_gzip", category=FunctionCategory.CODEC, fallible=False,
    parameters=[_p("value", "string"), _p("compression_level", "int", True)],
    return_type="string",
    description="Compresses a string with gzip.",
))
_add(FunctionSpec(
    name="decode_gzip", category=FunctionCategory.CODEC, fallible=True,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Decompresses a gzip-compressed string.",
))
_add(FunctionSpec(
    name="encode_zstd", category=FunctionCategory.CODEC, fallible=False,
    parameters=[_p("value", "string"), _p("compression_level", "int", True)],
    return_type="string",
    description="Compresses a string with zstd.",
))
_add(FunctionSpec(
    name="decode_zstd", category=FunctionCategory.CODEC, fallible=True,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Decompresses a zstd-compressed string.",
))

# ───────────────────────────────────────────────────────────────────────
#  Hash functions
# ───────────────────────────────────────────────────────────────────────

_add(FunctionSpec(
    name="md5", category=FunctionCategory.HASH, fallible=False,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Calculates the MD5 hash of a string.",
))
_add(FunctionSpec(
    name="sha1", category=FunctionCategory.HASH, fallible=False,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Calculates the SHA-1 hash of a string.",
))
_add(FunctionSpec(
    name="sha2", category=FunctionCategory.HASH, fallible=False,
    parameters=[_p("value", "string"), _p("variant", "string", True)],
    return_type="string",
    description="Calculates a SHA-2 hash of a string.",
    example=".digest = sha2(.message)",
))
_add(FunctionSpec(
    name="sha3", category=FunctionCategory.HASH, fallible=False,
    parameters=[_p("value", "string"), _p("variant", "string", True)],
    return_type="string",
    description="Calculates a SHA-3 hash of a string.",
))
_add(FunctionSpec(
    name="hmac", category=FunctionCategory.HASH, fallible=False,
    parameters=[_p("value", "string"), _p("key", "string"), _p("algorithm", "string", True)],
    return_type="string",
    description="Calculates an HMAC of a string with the given key.",
))
_add(FunctionSpec(
    name="seahash", category=FunctionCategory.HASH, fallible=False,
    parameters=[_p("value", "string")],
    return_type="int",
    description="Calculates a SeaHash of a string.",
))

# ───────────────────────────────────────────────────────────────────────
#  Type checks and assertions
# ───────────────────────────────────────────────────────────────────────

for _type_name in ("string", "integer", "float", "boolean", "array", "object",
                   "timestamp", "null", "regex"):
    _add(FunctionSpec(
        name=f"is_{_type_name}", category=FunctionCategory.TYPE, fallible=False,
        parameters=[_p("value", "any")],
        return_type="bool",
        description=f"Checks whether a value is of type {_type_name}.",
        example=f"if is_{_type_name}(.field) {{ .kind = \"{_type_name}\" }}",
    ))

_add(FunctionSpec(
    name="is_nullish", category=FunctionCategory.TYPE, fallible=False,
    parameters=[_p("value", "any")],
    return_type="bool",
    description="Checks whether a value is null, an empty string or whitespace only.",
))
_add(FunctionSpec(
    name="is_empty", category=FunctionCategory.TYPE, fallible=False,
    parameters=[_p("value", "string|array|object")],
    return_type="bool",
    description="Checks whether a string, array or object is empty.",
))

# Short spellings accepted by editor tooling alongside is_integer / is_boolean
for _short, _long in (("int", "integer"), ("bool", "boolean")):
    _add(FunctionSpec(
        name=f"is_{_short}", category=FunctionCategory.TYPE, fallible=False,
        parameters=[_p("value", "any")],
        return_type="bool",
        description=f"Checks whether a value is of type {_long} (same as is_{_long}).",
        example=f"if is_{_short}(.field) {{ .kind = \"{_long}\" }}",
    ))

_add(FunctionSpec(
    name="type", category=FunctionCategory.TYPE, fallible=False,
    parameters=[_p("value", "any")],
    return_type="string",
    description="Returns the name of the value's type.",
    example=".kind = type(.field)",
))

for _type_name in ("string", "int", "float", "bool", "array", "object", "timestamp"):
    _add(FunctionSpec(
        name=_type_name, category=FunctionCategory.TYPE, fallible=True,
        parameters=[_p("value", "any")],
        return_type=_type_name,
        description=f"Returns the value if it is a {_type_name}, otherwise raises an error.",
        example=f".field = {_type_name}!(.field)",
    ))

# ───────────────────────────────────────────────────────────────────────
#  Objects, arrays and enumeration
# ───────────────────────────────────────────────────────────────────────

_add(FunctionSpec(
    name="del", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("path", "path"), _p("compact", "bool", True)],
    return_type="any",
    description="Deletes a field from the event and returns its value.",
    example="del(.sensitive_field)",
))
_add(FunctionSpec(
    name="exists", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("path", "path")],
    return_type="bool",
    description="Checks whether a path exists in the event.",
    example="if exists(.user) { .has_user = true }",
))
_add(FunctionSpec(
    name="get", category=FunctionCategory.OBJECT, fallible=True,
    parameters=[_p("value", "object|array"), _p("path", "array")],
    return_type="any",
    description="Dynamically reads a value from an object or array by path segments.",
))
_add(FunctionSpec(
    name="set", category=FunctionCategory.OBJECT, fallible=True,
    parameters=[_p("value", "object|array"), _p("path", "array"), _p("data", "any")],
    return_type="object|array",
    description="Dynamically writes a value into an object or array by path segments.",
))
_add(FunctionSpec(
    name="remove", category=FunctionCategory.OBJECT, fallible=True,
    parameters=[_p("value", "object|array"), _p("path", "array"), _p("compact", "bool", True)],
    return_type="object|array",
    description="Dynamically removes a value from an object or array by path segments.",
))
_add(FunctionSpec(
    name="merge", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("to", "object"), _p("from", "object"), _p("deep", "bool", True)],
    return_type="object",
    description="Merges two objects.",
    example=". = merge(., .nested)",
))
_add(FunctionSpec(
    name="keys", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("value", "object")],
    return_type="array",
    description="Returns the keys of an object.",
))
_add(FunctionSpec(
    name="values", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("value", "object")],
    return_type="array",
    description="Returns the values of an object.",
))
_add(FunctionSpec(
    name="flatten", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("value", "object|array"), _p("separator", "string", True)],
    return_type="object|array",
    description="Flattens nested objects or arrays.",
))
_add(FunctionSpec(
    name="unflatten", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("value", "object"), _p("separator", "string", True)],
    return_type="object",
    description="Unflattens an object with separated keys into nested objects.",
))
_add(FunctionSpec(
    name="compact", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("value", "object|array"), _p("recursive", "bool", True)],
    return_type="object|array",
    description="Removes empty values from an object or array.",
))
_add(FunctionSpec(
    name="map_keys", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("value", "object"), _p("recursive", "bool", True)],
    return_type="object",
    description="Maps the keys of an object with a closure.",
))
_add(FunctionSpec(
    name="map_values", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("value", "object|array"), _p("recursive", "bool", True)],
    return_type="object|array",
    description="Maps the values of an object or array with a closure.",
))
_add(FunctionSpec(
    name="filter", category=FunctionCategory.ENUMERATE, fallible=False,
    parameters=[_p("value", "object|array")],
    return_type="object|array",
    description="Filters elements of an object or array with a closure.",
))
_add(FunctionSpec(
    name="for_each", category=FunctionCategory.ENUMERATE, fallible=False,
    parameters=[_p("value", "object|array")],
    return_type="null",
    description="Iterates over an object or array with a closure.",
))
_add(FunctionSpec(
    name="unnest", category=FunctionCategory.OBJECT, fallible=True,
    parameters=[_p("path", "path")],
    return_type="array",
    description="Unnests an array field into one event per element.",
))
_add(FunctionSpec(
    name="append", category=FunctionCategory.ARRAY, fallible=False,
    parameters=[_p("value", "array"), _p("items", "array")],
    return_type="array",
    description="Appends the items to the end of an array.",
))
_add(FunctionSpec(
    name="push", category=FunctionCategory.ARRAY, fallible=False,
    parameters=[_p("value", "array"), _p("item", "any")],
    return_type="array",
    description="Adds an item to the end of an array.",
))
_add(FunctionSpec(
    name="chunks", category=FunctionCategory.ARRAY, fallible=True,
    parameters=[_p("value", "array|string"), _p("chunk_size", "int")],
    return_type="array",
    description="Splits an array or string into chunks of the given size.",
))
_add(FunctionSpec(
    name="includes", category=FunctionCategory.ARRAY, fallible=False,
    parameters=[_p("value", "array"), _p("item", "any")],
    return_type="bool",
    description="Checks whether an array includes the given item.",
))
_add(FunctionSpec(
    name="length", category=FunctionCategory.ARRAY, fallible=False,
    parameters=[_p("value", "string|array|object")],
    return_type="int",
    description="Returns the length of a string, array or object.",
    example=".message_length = length(.message)",
))
_add(FunctionSpec(
    name="unique", category=FunctionCategory.ARRAY, fallible=False,
    parameters=[_p("value", "array")],
    return_type="array",
    description="Returns the unique elements of an array.",
))
_add(FunctionSpec(
    name="find", category=FunctionCategory.STRING, fallible=False,
    parameters=[_p("value", "string"), _p("pattern", "string|regex"), _p("from", "int", True)],
    return_type="int",
    description="Returns the start index of the first match of a pattern, or -1 if not found.",
    example='.pos = find(.message, "error")',
))
_add(FunctionSpec(
    name="pop", category=FunctionCategory.ARRAY, fallible=False,
    parameters=[_p("value", "array")],
    return_type="array",
    description="Removes the last item from an array.",
    example=".items = pop(.items)",
))
_add(FunctionSpec(
    name="sort", category=FunctionCategory.ARRAY, fallible=False,
    parameters=[_p("value", "array")],
    return_type="array",
    description="Sorts the elements of an array.",
))
_add(FunctionSpec(
    name="reverse", category=FunctionCategory.ARRAY, fallible=False,
    parameters=[_p("value", "array|string")],
    return_type="array|string",
    description="Reverses the order of an array or string.",
))
_add(FunctionSpec(
    name="group_by", category=FunctionCategory.ENUMERATE, fallible=False,
    parameters=[_p("value", "array")],
    return_type="object",
    description="Groups the elements of an array with a closure.",
))
_add(FunctionSpec(
    name="reduce", category=FunctionCategory.ENUMERATE, fallible=False,
    parameters=[_p("value", "array"), _p("initial", "any")],
    return_type="any",
    description="Folds the elements of an array into one value with a closure.",
))
_add(FunctionSpec(
    name="has", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("value", "object"), _p("key", "string")],
    return_type="bool",
    description="Checks whether an object has the given key.",
))
_add(FunctionSpec(
    name="only_fields", category=FunctionCategory.OBJECT, fallible=False,
    parameters=[_p("paths", "array")],
    return_type="null",
    description="Keeps only the given fields in the event, removing all others.",
))
_add(FunctionSpec(
    name="match_array", category=FunctionCategory.ENUMERATE, fallible=False,
    parameters=[_p("value", "array"), _p("pattern", "regex"), _p("all", "bool", True)],
    return_type="bool",
    description="Checks whether elements of an array match a regular expression.",
))
_add(FunctionSpec(
    name="tally", category=FunctionCategory.ENUMERATE, fallible=False,
    parameters=[_p("value", "array")],
    return_type="object",
    description="Counts the occurrences of each string in an array.",
))
_add(FunctionSpec(
    name="tally_value", category=FunctionCategory.ENUMERATE, fallible=False,
    parameters=[_p("array", "array"), _p("value", "any")],
    return_type="int",
    description="Counts the occurrences of a value in an array.",
))

# ───────────────────────────────────────────────────────────────────────
#  Timestamps, IP addresses, randomness
# ───────────────────────────────────────────────────────────────────────

_add(FunctionSpec(
    name="now", category=FunctionCategory.TIMESTAMP, fallible=False,
    parameters=[],
    return_type="timestamp",
    description="Returns the current timestamp in UTC.",
    example=".processed_at = now()",
))
_add(FunctionSpec(
    name="format_timestamp", category=FunctionCategory.TIMESTAMP, fallible=True,
    parameters=[_p("value", "timestamp"), _p("format", "string"), _p("timezone", "string", True)],
    return_type="string",
    description="Formats a timestamp with the given strftime format.",
    example='.date = format_timestamp!(.timestamp, "%Y-%m-%d")',
))
_add(FunctionSpec(
    name="ip_cidr_contains", category=FunctionCategory.IP, fallible=True,
    parameters=[_p("cidr", "string|array"), _p("value", "string")],
    return_type="bool",
    description="Checks whether an IP address is contained in a CIDR block.",
))
_add(FunctionSpec(
    name="ip_subnet", category=FunctionCategory.IP, fallible=True,
    parameters=[_p("value", "string"), _p("subnet", "string")],
    return_type="string",
    description="Extracts the subnet of an IP address.",
))
_add(FunctionSpec(
    name="ip_to_ipv6", category=FunctionCategory.IP, fallible=True,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Converts an IPv4 address to an IPv4-mapped IPv6 address.",
))
_add(FunctionSpec(
    name="ipv6_to_ipv4", category=FunctionCategory.IP, fallible=True,
    parameters=[_p("value", "string")],
    return_type="string",
    description="Converts an IPv4-mapped IPv6 address to IPv4.",
))
_add(FunctionSpec(
    name="ip_aton", category=FunctionCategory.IP, fallible=True,
    parameters=[_p("value", "string")],
    return_type="int",
    description="Converts an IPv4 address in dotted notation to an integer.",
))
_add(FunctionSpec(
    name="ip_ntoa", category=FunctionCategory.IP, fallible=True,
    parameters=[_p("value", "int")],
    return_type="string",
    description="Converts an integer to an IPv4 address in dotted notation.",
))
_add(FunctionSpec(
    name="is_ipv4", category=FunctionCategory.IP, fallible=False,
    parameters=[_p("value", "string")],
    return_type="bool",
    description="Checks whether a string is a valid IPv4 address.",
))
_add(FunctionSpec(
    name="uuid_v4", category=FunctionCategory.RANDOM, fallible=False,
    parameters=[],
    return_type="string",
    description="Generates a random UUID version 4.",
    example=".id = uuid_v4()",
))
_add(FunctionSpec(
    name="uuid_v7", category=FunctionCategory.RANDOM, fallible=False,
    parameters=[_p("timestamp", "timestamp", True)],
    return_type="string",
    description="Generates a time-ordered UUID version 7.",
))
_add(FunctionSpec(
    name="random_int", category=FunctionCategory.RANDOM, fallible=True,
    parameters=[_p("min", "int"), _p("max", "int")],
    return_type="int",
    description="Returns a random integer in the range [min, max).",
))
_add(FunctionSpec(
    name="random_float", category=FunctionCategory.RANDOM, fallible=True,
    parameters=[_p("min", "float"), _p("max", "float")],
    return_type="float",
    description="Returns a random float in the range [min, max).",
))
_add(FunctionSpec(
    name="random_bool", category=FunctionCategory.RANDOM, fallible=False,
    parameters=[],
    return_type="bool",
    description="Returns a random boolean.",
))
_add(FunctionSpec(
    name="random_bytes", category=FunctionCategory.RANDOM, fallible=True,
    parameters=[_p("length", "int")],
    return_type="string",
    description="Returns a string of random bytes.",
))

# ───────────────────────────────────────────────────────────────────────
#  Event, system and debugging
# ───────────────────────────────────────────────────────────────────────

_add(FunctionSpec(
    name="get_env_var", category=FunctionCategory.EVENT, fallible=True,
    parameters=[_p("name", "string")],
    return_type="string",
    description="Returns the value of an environment variable.",
    example='.env = get_env_var!("ENVIRONMENT")',
))
_add(FunctionSpec(
    name="get_hostname", category=FunctionCategory.EVENT, fallible=True,
    parameters=[],
    return_type="string",
    description="Returns the local system hostname.",
    example=".host = get_hostname!()",
))
_add(FunctionSpec(
    name="log", category=FunctionCategory.DEBUG, fallible=False,
    parameters=[_p("value", "any"), _p("level", "string", True), _p("rate_limit_secs", "int", True)],
    return_type="null",
    description='Logs a value at the given level (default: "info").',
    example='log("Processing event", level: "debug")',
))
_add(FunctionSpec(
    name="assert", category=FunctionCategory.DEBUG, fallible=True,
    parameters=[_p("condition", "bool"), _p("message", "string", True)],
    return_type="null",
    description="Aborts the program with an error if the condition is false.",
    example='assert!(exists(.id), message: "missing id")',
))
_add(FunctionSpec(
    name="assert_eq", category=FunctionCategory.DEBUG, fallible=True,
    parameters=[_p("left", "any"), _p("right", "any"), _p("message", "string", True)],
    return_type="null",
    description="Aborts the program with an error if the two values differ.",
))


# ═══════════════════════════════════════════════════════════════════════
#  Registry view
# ═══════════════════════════════════════════════════════════════════════

class FunctionRegistry:
    """Immutable name → FunctionSpec mapping plus the derived views the checks need."""

    def __init__(self, specs: Iterable[FunctionSpec]):
        by_name: Dict[str, FunctionSpec] = {}
        for spec in specs:
            if spec.name in by_name:
                logger.debug("Function %s redefined; keeping the later entry", spec.name)
            by_name[spec.name] = spec
        self._specs: Mapping[str, FunctionSpec] = MappingProxyType(by_name)
        self._names: Tuple[str, ...] = tuple(by_name)
        self._fallible: Tuple[str, ...] = tuple(n for n, s in by_name.items() if s.fallible)

    @property
    def specs(self) -> Mapping[str, FunctionSpec]:
        return self._specs

    @property
    def names(self) -> Tuple[str, ...]:
        """All registered names, in registration order."""
        return self._names

    @property
    def fallible_names(self) -> Tuple[str, ...]:
        return self._fallible

    def get(self, name: str) -> Optional[FunctionSpec]:
        return self._specs.get(name)

    def categories(self) -> List[FunctionCategory]:
        seen: List[FunctionCategory] = []
        for spec in self._specs.values():
            if spec.category not in seen:
                seen.append(spec.category)
        return seen

    def by_category(self, category) -> List[FunctionSpec]:
        category = FunctionCategory(category)
        return [s for s in self._specs.values() if s.category == category]

    def merged_with(self, extra: Iterable[FunctionSpec]) -> "FunctionRegistry":
        """Return a new registry with ``extra`` layered over this one (same names override)."""
        return FunctionRegistry(list(self._specs.values()) + list(extra))

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[FunctionSpec]:
        return iter(self._specs.values())


_DEFAULT_REGISTRY: Optional[FunctionRegistry] = None


def default_registry() -> FunctionRegistry:
    """The process-wide registry of built-in functions (built on first use)."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = FunctionRegistry(_BUILTINS)
        logger.info(
            "Function registry built: %d functions (%d fallible)",
            len(_DEFAULT_REGISTRY), len(_DEFAULT_REGISTRY.fallible_names),
        )
    return _DEFAULT_REGISTRY


def get_function(name: str) -> Optional[FunctionSpec]:
    """Look up a single built-in function by name (e.g. 'parse_json')."""
    return default_registry().get(name)


# ═══════════════════════════════════════════════════════════════════════
#  Loading extra functions
# ═══════════════════════════════════════════════════════════════════════

def load_functions_file(path: str) -> List[FunctionSpec]:
    """Load FunctionSpec entries from a JSON file.

    Accepts ``{"functions": [...]}`` or a bare top-level array.  Unreadable
    files and malformed entries are logged and skipped.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error("Functions file not found: %s", path)
        return []
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read %s: %s", path, e)
        return []

    if isinstance(data, dict):
        data = data.get("functions")
    if not isinstance(data, list):
        logger.error("Unrecognised functions file format in %s", path)
        return []

    specs: List[FunctionSpec] = []
    for item in data:
        try:
            specs.append(FunctionSpec.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping malformed function entry: %s (%d errors)", item, e.error_count())
    logger.info("Loaded %d extra functions from %s", len(specs), path)
    return specs


# ═══════════════════════════════════════════════════════════════════════
#  Formatting
# ═══════════════════════════════════════════════════════════════════════

def format_function_signature(spec: FunctionSpec) -> str:
    """Return e.g. ``parse_json!(value: string, max_depth?: int) -> any``."""
    params = ", ".join(
        f"{p.name}{'?' if p.optional else ''}: {p.type}" for p in spec.parameters
    )
    bang = "!" if spec.fallible else ""
    return f"{spec.name}{bang}({params}) -> {spec.return_type}"


def format_function_explanation(name: str, registry: Optional[FunctionRegistry] = None) -> str:
    """Return a markdown explanation of a function."""
    spec = (registry or default_registry()).get(name)
    if spec is None:
        return f"Unknown function: {name}"

    explanation = f"""## {spec.name}
**Category**: {spec.category.value}

```vrl
{format_function_signature(spec)}
```

{spec.description}"""

    if spec.fallible:
        explanation += (
            "\n\n**Fallible**: handle errors with `"
            f"{spec.name}!(...)`, a `?? default` fallback, or `result, err = {spec.name}(...)`."
        )
    if spec.example:
        explanation += f"\n\n### Example\n```vrl\n{spec.example}\n```"
    return explanation
