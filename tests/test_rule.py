"""Tests for waymark.routing.rule — template parsing, compile, match, build."""

import pytest

from waymark.errors import (
    ConverterArgumentsError,
    ConverterDelimiterError,
    DuplicateVariableError,
    EmptyVariableError,
    InvalidConverterArguments,
    LeadingSlashError,
    RuleAlreadyBound,
    RuleCompileError,
    RuleNotBound,
    TemplateError,
    VariableDelimiterError,
)
from waymark.routing.converters import IntConverter, PathConverter, StringConverter
from waymark.routing.router import Router
from waymark.routing.rule import (
    Rule,
    RuleMatch,
    TraceSegment,
    normalize_methods,
    parse_arguments,
    parse_param,
    split_path,
)


def _bound(template: str, **kwargs: object) -> Rule:
    rule = Rule(template, **kwargs)  # type: ignore[arg-type]
    rule.bind(Router())
    return rule


class TestSplitPath:
    @pytest.mark.parametrize(
        ("path", "parts"),
        [
            ("/", []),
            ("/a", ["a"]),
            ("/a/b", ["a", "b"]),
            ("/a/b/", ["a", "b"]),
            ("/a//b", ["a", "", "b"]),
        ],
    )
    def test_split(self, path: str, parts: list[str]) -> None:
        assert split_path(path) == parts


class TestParseParam:
    def test_bare_name(self) -> None:
        assert parse_param("/<foo>", "<foo>") == ("foo", None, {})

    def test_converter(self) -> None:
        assert parse_param("/<foo:int>", "<foo:int>") == ("foo", "int", {})

    def test_converter_arguments(self) -> None:
        name, key, args = parse_param("/", "<foo:int(digits=4,min=1)>")
        assert (name, key) == ("foo", "int")
        assert args == {"digits": "4", "min": "1"}

    def test_empty_parentheses(self) -> None:
        assert parse_param("/", "<foo:int()>") == ("foo", "int", {})

    def test_empty_name(self) -> None:
        with pytest.raises(EmptyVariableError):
            parse_param("/", "<:int>")


class TestParseArguments:
    def test_pairs(self) -> None:
        assert parse_arguments("/", "<x>", "a=1,b=2") == {"a": "1", "b": "2"}

    def test_single_value(self) -> None:
        assert parse_arguments("/", "<x>", "items=a") == {"items": "a"}

    @pytest.mark.parametrize(
        "arguments",
        ["digits", "digits=", "=4", "a=b=c", "b,a=1", "a=1,b", "items=a,b,c", "a=1,"],
    )
    def test_malformed(self, arguments: str) -> None:
        with pytest.raises(ConverterArgumentsError):
            parse_arguments("/", "<x>", arguments)


class TestNewRule:
    @pytest.mark.parametrize(
        "template",
        [
            "/",
            "/foo",
            "/foo/bar",
            "/foo/<bar>",
            "/foo/<bar>/baz",
            "/foo/<bar:int>",
            "/foo/<bar:int(digits=4)>",
        ],
    )
    def test_keeps_template(self, template: str) -> None:
        assert Rule(template).template == template

    @pytest.mark.parametrize("template", ["", "path", "foo/"])
    def test_leading_slash(self, template: str) -> None:
        with pytest.raises(LeadingSlashError):
            Rule(template)

    def test_leading_slash_is_template_error(self) -> None:
        with pytest.raises(TemplateError, match="leading slash"):
            Rule("path")


class TestMethods:
    @pytest.mark.parametrize(
        ("given", "expected"),
        [
            (None, ("GET", "HEAD")),
            ([], ("GET", "HEAD")),
            (["POST"], ("POST",)),
            (["POST", "PUT"], ("POST", "PUT")),
            (["post"], ("POST",)),
            (["POST", "POST"], ("POST",)),
            (["post", "POST"], ("POST",)),
            (["POST", "post"], ("POST",)),
            (["GET", "HEAD"], ("GET", "HEAD")),
            (["GET"], ("GET", "HEAD")),
            (["HEAD"], ("HEAD",)),
            (["head", "get"], ("HEAD", "GET")),
        ],
    )
    def test_normalized(self, given: list[str] | None, expected: tuple[str, ...]) -> None:
        assert Rule("/", methods=given).methods == expected

    def test_without_implicit_head(self) -> None:
        assert normalize_methods(["GET"], implicit_head=False) == ("GET",)

    def test_allows_is_case_insensitive(self) -> None:
        rule = Rule("/", methods=["POST"])
        assert rule.allows("post")
        assert not rule.allows("GET")


class TestDefaults:
    def test_constructor(self) -> None:
        rule = Rule("/", defaults={"foo": "foo", "bar": 4})
        assert rule.defaults == {"foo": "foo", "bar": 4}

    def test_set_defaults_chains(self) -> None:
        rule = Rule("/")
        args = {"foo": "foo", "bar": 4}
        assert rule.set_defaults(args) is rule
        assert rule.defaults == args

    def test_defaults_are_copied(self) -> None:
        args = {"foo": 1}
        rule = Rule("/", defaults=args)
        args["foo"] = 2
        assert rule.defaults == {"foo": 1}


class TestCompile:
    @pytest.mark.parametrize(
        ("template", "pattern"),
        [
            ("/", r"^/$"),
            ("/foo", r"^/foo$"),
            ("/foo/bar", r"^/foo/bar$"),
            ("/foo/<bar>", r"^/foo/(?P<bar>[^/]{1,})$"),
            ("/foo/<bar>/baz", r"^/foo/(?P<bar>[^/]{1,})/baz$"),
            ("/foo/<bar:int>", r"^/foo/(?P<bar>\d+)$"),
            ("/foo/<bar:int(digits=4)>", r"^/foo/(?P<bar>\d+)$"),
            ("/foo/<bar:path>", r"^/foo/(?P<bar>[^/].*?)$"),
            ("/<page:any(items=a)>", r"^/(?P<page>(?:a))$"),
        ],
    )
    def test_pattern(self, template: str, pattern: str) -> None:
        assert _bound(template).pattern.pattern == pattern

    def test_literals_are_escaped(self) -> None:
        rule = _bound("/file.txt")
        assert rule.match("/file.txt") == {}
        assert rule.match("/fileXtxt") is None

    def test_trace(self) -> None:
        rule = _bound("/a/<foo>/<bar:path>/baz")
        assert rule.trace == (
            TraceSegment("a"),
            TraceSegment("foo", is_param=True),
            TraceSegment("bar", is_param=True),
            TraceSegment("baz"),
        )
        assert rule.arguments == ("foo", "bar")

    def test_converters(self) -> None:
        rule = _bound("/<a>/<b:int>/<c:path>/<d:unknown>")
        assert isinstance(rule.converters["a"], StringConverter)
        assert isinstance(rule.converters["b"], IntConverter)
        assert isinstance(rule.converters["c"], PathConverter)
        assert isinstance(rule.converters["d"], StringConverter)

    @pytest.mark.parametrize(
        ("template", "weight"),
        [
            ("/", 0),
            ("/foo", -3),
            ("/foo/bar", -6),
            ("/<foo>", 100),
            ("/<foo:int>", 50),
            ("/<foo:path>", 200),
            ("/a/<foo>/<bar:path>/baz", 296),
        ],
    )
    def test_weight(self, template: str, weight: int) -> None:
        assert _bound(template).weight == weight

    def test_trailing_slash_compiles_like_without(self) -> None:
        assert _bound("/a/b/").pattern.pattern == _bound("/a/b").pattern.pattern


class TestCompileErrors:
    @pytest.mark.parametrize(
        ("template", "error"),
        [
            ("/<>", EmptyVariableError),
            ("/<:int>", EmptyVariableError),
            ("/<foo", VariableDelimiterError),
            ("/<foo>/<foo>", DuplicateVariableError),
            ("/<foo>/<foo:int>", DuplicateVariableError),
            ("/<foo:int(>", ConverterDelimiterError),
            ("/<foo:int((>", ConverterDelimiterError),
            ("/<foo:int(a=1))>", ConverterDelimiterError),
            ("/<foo:int(digits)>", ConverterArgumentsError),
            ("/<foo:int(digits=)>", ConverterArgumentsError),
            ("/<foo:string(foo=1,bar)>", ConverterArgumentsError),
            ("/<foo:string(minLength=2,bar)>", ConverterArgumentsError),
            ("/<foo:any(items=a,b)>", ConverterArgumentsError),
            ("/<foo:int(digits=1_0)>", InvalidConverterArguments),
            ("/<foo:int(digits=x)>", InvalidConverterArguments),
            ("/<foo:path(a=b)>", InvalidConverterArguments),
            ("/<foo:any>", InvalidConverterArguments),
        ],
    )
    def test_error(self, template: str, error: type[Exception]) -> None:
        rule = Rule(template)
        with pytest.raises(error) as exc_info:
            rule.bind(Router())
        assert template in str(exc_info.value)

    def test_empty_parentheses_compile(self) -> None:
        assert _bound("/<foo:int()>").arguments == ("foo",)

    def test_factory_returning_none(self) -> None:
        router = Router()
        router.converters.register("nothing", lambda args: None)
        with pytest.raises(InvalidConverterArguments):
            Rule("/<foo:nothing>").bind(router)

    def test_invalid_group_name(self) -> None:
        with pytest.raises(RuleCompileError):
            _bound("/<foo-bar>")

    def test_failed_bind_leaves_rule_unbound(self) -> None:
        rule = Rule("/<>")
        with pytest.raises(EmptyVariableError):
            rule.bind(Router())
        assert rule.router is None


class TestBinding:
    def test_compile_unbound(self) -> None:
        with pytest.raises(RuleNotBound):
            Rule("/").compile()

    def test_pattern_unbound(self) -> None:
        with pytest.raises(RuleNotBound):
            _ = Rule("/").pattern

    def test_double_bind(self) -> None:
        rule = _bound("/")
        with pytest.raises(RuleAlreadyBound):
            rule.bind(Router())

    def test_repr(self) -> None:
        rule = Rule("/x", "x")
        assert "unbound" in repr(rule)
        rule.bind(Router())
        assert "(bound)" in repr(rule)


class TestRuleMatch:
    @pytest.mark.parametrize(
        ("template", "path", "args"),
        [
            ("/", "/", {}),
            ("/<foo>", "/bar", {"foo": "bar"}),
            ("/<foo:int>", "/4", {"foo": 4}),
            ("/<foo>/<bar>", "/bar/baz", {"foo": "bar", "bar": "baz"}),
            ("/<foo>/bar", "/foo/bar", {"foo": "foo"}),
            ("/<foo:path>", "/a/b/c", {"foo": "a/b/c"}),
        ],
    )
    def test_match(self, template: str, path: str, args: dict[str, object]) -> None:
        assert _bound(template).match(path) == args

    def test_no_match(self) -> None:
        assert _bound("/foo").match("/bar") is None

    def test_conversion_failure(self) -> None:
        assert _bound("/<id:int(digits=2)>").match("/4") is None

    def test_trailing_newline_does_not_match(self) -> None:
        assert _bound("/foo").match("/foo\n") is None

    def test_rule_match_is_frozen(self) -> None:
        match = RuleMatch(rule=_bound("/"), args={})
        with pytest.raises(AttributeError):
            match.args = {"a": 1}  # type: ignore[misc]


class TestRuleBuild:
    @pytest.mark.parametrize(
        ("template", "args", "url"),
        [
            ("/", {}, "/"),
            ("/foo", {}, "/foo"),
            ("/foo", {"bar": "bar", "baz": 4}, "/foo?bar=bar&baz=4"),
            ("/foo/<bar>", {"bar": "bar", "baz": 4}, "/foo/bar?baz=4"),
            ("/foo/<bar:int(digits=3)>", {"bar": 4}, "/foo/004"),
            ("/foo/<bar:path>", {"bar": "a/b"}, "/foo/a/b"),
        ],
    )
    def test_build(self, template: str, args: dict[str, object], url: str) -> None:
        assert _bound(template).build(args) == url

    def test_build_does_not_mutate_args(self) -> None:
        args = {"bar": "x", "q": "1"}
        _bound("/foo/<bar>").build(args)
        assert args == {"bar": "x", "q": "1"}

    def test_build_uses_defaults(self) -> None:
        rule = _bound("/page/<n:int>", defaults={"n": 1})
        assert rule.build({}) == "/page/1"

    def test_build_converter_failure(self) -> None:
        assert _bound("/<id:int>").build({"id": "seven"}) is None

    def test_query_encoding(self) -> None:
        assert _bound("/").build({"q": "a b&c"}) == "/?q=a+b%26c"

    def test_query_lists(self) -> None:
        assert _bound("/").build({"tag": ["a", "b"]}) == "/?tag=a&tag=b"

    def test_build_parts_keeps_question_mark_in_path(self) -> None:
        rule = _bound("/search/<q>")
        assert rule.build_parts({"q": "a?b", "page": 2}) == ("/search/a?b", "page=2")
        assert rule.build_parts({"q": "x"}) == ("/search/x", "")

    def test_query_unsorted(self) -> None:
        assert _bound("/").build({"b": 1, "a": 2}, query_sort=False) == "/?b=1&a=2"


class TestBuildable:
    def test_method_must_be_allowed(self) -> None:
        rule = _bound("/", methods=["POST"])
        assert rule.buildable("POST", {})
        assert not rule.buildable("GET", {})

    def test_arguments_required(self) -> None:
        rule = _bound("/<id>")
        assert not rule.buildable("GET", {})
        assert rule.buildable("GET", {"id": "x"})

    def test_defaults_fill_arguments(self) -> None:
        rule = _bound("/<id>", defaults={"id": "x"})
        assert rule.buildable("GET", {})

    def test_defaults_filter_conflicting_args(self) -> None:
        rule = _bound("/<id:int>", defaults={"id": 0})
        assert rule.buildable("GET", {"id": 0})
        assert not rule.buildable("GET", {"id": 7})
