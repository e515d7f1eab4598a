import pytest

from ast_corpus.code2seq import (
    Code2SeqFormatter,
    PathContext,
    csv_shield,
    csv_unshield,
    parse_path,
    parse_sample,
    render_sample,
    split_unescaped,
)
from ast_corpus.errors import MalformedTreeError
from ast_corpus.paths import PathMiner, PathRetrievalSettings
from ast_corpus.tree import SimpleNode
from ast_corpus.vocab import NodeTypeVocabulary

from conftest import inner, leaf


def mine(root, length=9, width=2):
    return PathMiner(PathRetrievalSettings(max_length=length, max_width=width)).retrieve_paths(root)


# ============================
# Shielding
# ============================
def test_csv_shield_escapes_separators():
    assert csv_shield("a,b c\nd") == "a\\,b\\ c\\nd"
    assert csv_shield("back\\slash") == "back\\\\slash"
    assert csv_shield("plain|token") == "plain|token"


@pytest.mark.parametrize("text", ["", "x", "a,b", "a b", "line\nbreak", "\\n", "\\", "a\\,b", "\r\n", " , "])
def test_csv_unshield_inverts_shield(text):
    assert csv_unshield(csv_shield(text)) == text


def test_shield_is_injective_on_lookalikes():
    # a literal backslash-n must not collide with a newline
    assert csv_shield("\\n") != csv_shield("\n")


def test_dangling_escape_is_rejected():
    with pytest.raises(ValueError):
        csv_unshield("abc\\")


def test_split_unescaped_ignores_escaped_separators():
    assert split_unescaped("a\\,b,c", ",") == ["a\\,b", "c"]
    assert split_unescaped("a\\\\,b", ",") == ["a\\\\", "b"]


# ============================
# Rendering
# ============================
def test_render_empty_method_sample(empty_method_tree):
    formatter = Code2SeqFormatter()
    paths = mine(empty_method_tree.root)
    line = formatter.render_sample(empty_method_tree.label, paths)

    label, *rendered = line.split(" ")
    assert label == "emptyMethod"
    assert len(rendered) == 29
    assert rendered[0] == "(,LPARENTH|PARAMETER_LIST|RPARENTH,)"
    assert "public,PUBLIC_KEYWORD|MODIFIER_LIST|METHOD|TYPE_PARAMETER_LIST,EMPTY" in rendered
    for path in rendered:
        assert len(split_unescaped(path, ",")) == 3
    assert not line.endswith(" ")
    assert "\n" not in line


def test_render_with_token_types(typed_empty_method_tree):
    formatter = Code2SeqFormatter(include_token_types=True)
    paths = mine(typed_empty_method_tree.root)
    rendered = formatter.render_sample(typed_empty_method_tree.label, paths).split(" ")[1:]

    assert rendered[0] == "<NT>,(,LPARENTH|PARAMETER_LIST|RPARENTH,),<NT>"
    for path in rendered:
        fields = split_unescaped(path, ",")
        assert len(fields) == 5
        assert fields[0] == "<NT>" and fields[4] == "<NT>"


def test_render_uses_resolved_types_when_present():
    root = inner("Call", leaf("Name", "x", resolved="int"), leaf("Constant", "1", resolved="float"))
    path = mine(root)[0]
    assert Code2SeqFormatter(include_token_types=True).render_path(path) == "int,x,Name|Call|Constant,1,float"


def test_render_shields_tokens_and_types():
    root = inner("Odd|Type", leaf("Str", "hello, world"), leaf("Str", "a\nb"))
    rendered = Code2SeqFormatter(include_token_types=True).render_path(mine(root)[0])
    assert rendered == "<NT>,hello\\,\\ world,Str|Odd\\|Type|Str,a\\nb,<NT>"
    assert parse_path(rendered).node_types == ["Str", "Odd|Type", "Str"]


def test_nodes_to_numbers(empty_method_tree):
    vocab = NodeTypeVocabulary()
    formatter = Code2SeqFormatter(vocabulary=vocab)
    rendered = formatter.render_sample("emptyMethod", mine(empty_method_tree.root)).split(" ")[1:]

    assert rendered[0] == "(,1|2|3,)"
    for path in rendered:
        for node_id in parse_path(path).node_types:
            assert int(node_id) in vocab.id_to_token
    assert vocab.get_id("LPARENTH") == 1


@pytest.mark.parametrize("broken_end", ["start", "end"])
def test_null_endpoint_token_is_malformed(broken_end):
    a, b = leaf("A", "a"), leaf("B", "b")
    if broken_end == "start":
        a.token = None
    else:
        b.token = None
    path = mine(inner("P", a, b))[0]
    with pytest.raises(MalformedTreeError):
        Code2SeqFormatter().render_path(path)


def test_malformed_sample_leaves_vocabulary_untouched():
    vocab = NodeTypeVocabulary()
    root = inner("P", leaf("A", "a"), leaf("B", "b"), SimpleNode("C"))
    with pytest.raises(MalformedTreeError):
        Code2SeqFormatter(vocabulary=vocab).render_sample("broken", mine(root))
    assert len(vocab) == 0


def test_missing_token_away_from_endpoints_is_fine():
    root = inner("P", leaf("A", "a"), leaf("B", "b"))
    assert root.token is None
    assert Code2SeqFormatter().render_path(mine(root)[0]) == "a,A|P|B,b"


def test_render_sample_without_paths():
    assert render_sample("lonely", []) == "lonely"
    assert Code2SeqFormatter().render_sample("lonely", []) == "lonely"


# ============================
# Decoding
# ============================
def test_parse_path_three_fields():
    ctx = parse_path("a,A|P|B,b")
    assert ctx == PathContext("a", ["A", "P", "B"], "b")
    assert not ctx.has_types


def test_parse_path_five_fields():
    ctx = parse_path("int,x,Name|Call|Constant,1,float")
    assert ctx.start_token_type == "int" and ctx.end_token_type == "float"
    assert ctx.start_token == "x" and ctx.end_token == "1"


@pytest.mark.parametrize("bad", ["a,b", "a,b,c,d", "1,2,3,4,5,6"])
def test_parse_path_rejects_wrong_field_count(bad):
    with pytest.raises(ValueError):
        parse_path(bad)


def test_decode_then_encode_is_identity(empty_method_tree):
    root = inner(
        "Weird Root",
        leaf("Str", "x, y"),
        inner("Call", leaf("Name", "back\\slash", resolved="some type"), leaf("Str", "multi\nline")),
    )
    for include_types in (False, True):
        formatter = Code2SeqFormatter(include_token_types=include_types)
        for tree_root in (root, empty_method_tree.root):
            for path in mine(tree_root):
                rendered = formatter.render_path(path)
                assert parse_path(rendered).encode() == rendered


def test_parse_sample_round_trip(empty_method_tree):
    line = Code2SeqFormatter().render_sample("empty method", mine(empty_method_tree.root))
    sample = parse_sample(line + "\n")
    assert sample.label == "empty method"
    assert len(sample.path_contexts) == 29
    assert sample.encode() == line
