"""
Tests for loading act logs (LAX files and tabular sources).
"""

from datetime import datetime

import polars as pl
import pytest

from lavi.common.exceptions import DataFormatError, DataIntegrityError
from lavi.community.io import import_lax, load_acts
from lavi.community.model import Call, Reply


class TestImportLax:
    """Test the LAX XML importer."""

    def test_import_fixture(self, fixtures_dir):
        community = import_lax(fixtures_dir / "test1.lax")

        assert community.name == "test1"
        assert community.act_count == 7
        assert community.actor_count == 4
        assert not community.use_dates

    def test_actor_names(self, fixtures_dir):
        community = import_lax(fixtures_dir / "test1.lax")

        assert community.get_actor(1).name == "alice"
        assert community.get_actor(2).name == "bob"
        # declared without a name, and only seen as an act source
        assert community.get_actor(3).name == "3"
        assert community.get_actor(4).name == "4"

    def test_act_types_and_targets(self, fixtures_dir):
        community = import_lax(fixtures_dir / "test1.lax")

        assert isinstance(community.get_act(1), Call)
        assert isinstance(community.get_act(5), Call)
        reply = community.get_act(7)
        assert isinstance(reply, Reply)
        assert reply.reference == 6
        assert community.target_of(reply) == 2
        assert community.min_time == 1357000000.0

    def test_use_dates(self, fixtures_dir):
        community = import_lax(fixtures_dir / "test1.lax", use_dates=True)

        assert community.use_dates
        first_act = datetime.fromtimestamp(1357000000).strftime("%a %b %d %H:%M:%S %Y")
        assert first_act in community.describe()

    def test_unknown_type_read_as_reply(self, tmp_path):
        path = tmp_path / "forward.lax"
        path.write_text(
            "<lax><meta><name>f</name></meta><actors/><actions>"
            '<act id="1" type="call" src="1" time="0"/>'
            '<act id="2" type="forward" src="2" reference="1" time="1" directed="false" weight="0.5"/>'
            "</actions></lax>"
        )

        community = import_lax(path)

        act = community.get_act(2)
        assert isinstance(act, Reply)
        assert act.directed is False
        assert act.weight == 0.5

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataFormatError, match="not found"):
            import_lax(tmp_path / "missing.lax")

    def test_malformed_xml(self, tmp_path):
        path = tmp_path / "broken.lax"
        path.write_text("<lax><actions><act id='1'")

        with pytest.raises(DataFormatError, match="Failed to parse LAX file"):
            import_lax(path)

    def test_missing_attribute(self, tmp_path):
        path = tmp_path / "nosrc.lax"
        path.write_text('<lax><actions><act id="1" type="call" time="0"/></actions></lax>')

        with pytest.raises(DataFormatError, match="'src' attribute"):
            import_lax(path)

    def test_dangling_reference(self, tmp_path):
        path = tmp_path / "dangling.lax"
        path.write_text(
            '<lax><actions><act id="1" type="reply" src="1" reference="9" time="0"/></actions></lax>'
        )

        with pytest.raises(DataIntegrityError, match="references unknown act 9"):
            import_lax(path)


class TestLoadActs:
    """Test building communities from tables."""

    @pytest.fixture
    def acts_df(self):
        return pl.DataFrame({
            "id": [1, 2, 3, 4],
            "type": ["call", "reply", "reply", "reply"],
            "src": [10, 11, 12, 10],
            "reference": [None, 1, 1, 2],
            "time": [0.0, 5.0, 7.0, 9.0],
        })

    def test_from_dataframe(self, acts_df):
        community = load_acts(acts_df, name="thread")

        assert community.name == "thread"
        assert community.act_count == 4
        assert community.actor_count == 3
        assert [type(a) for a in community.acts] == [Call, Reply, Reply, Reply]
        assert community.target_of(community.get_act(4)) == 11

    def test_from_csv(self, acts_df, tmp_path):
        path = tmp_path / "acts.csv"
        acts_df.write_csv(path)

        community = load_acts(path)

        assert community.act_count == 4
        assert community.max_time == 9.0

    def test_actor_table(self, acts_df):
        actors = pl.DataFrame({"id": [10, 11], "name": ["alice", "bob"]})

        community = load_acts(acts_df, actors=actors)

        assert community.get_actor(10).name == "alice"
        assert community.get_actor(12).name == "12"

    def test_optional_columns(self):
        df = pl.DataFrame({
            "id": [1, 2],
            "type": ["call", "reply"],
            "src": [1, 2],
            "reference": [None, 1],
            "time": [0.0, 1.0],
            "directed": [None, "false"],
            "weight": [None, 3.0],
        })

        reply = load_acts(df).get_act(2)

        assert reply.directed is False
        assert reply.weight == 3.0

    def test_missing_columns(self):
        with pytest.raises(DataFormatError, match="Missing required columns"):
            load_acts(pl.DataFrame({"id": [1], "src": [1]}))

    def test_unknown_type(self, acts_df):
        df = acts_df.with_columns(
            pl.when(pl.col("id") == 3).then(pl.lit("forward")).otherwise(pl.col("type")).alias("type")
        )

        with pytest.raises(DataFormatError, match="Unknown act type 'forward'") as exc_info:
            load_acts(df)
        assert exc_info.value.details["line_number"] == 2

    def test_reply_without_reference(self):
        df = pl.DataFrame({
            "id": [1, 2],
            "type": ["call", "reply"],
            "src": [1, 2],
            "reference": [None, None],
            "time": [0.0, 1.0],
        })

        with pytest.raises(DataFormatError, match="has no reference"):
            load_acts(df)

    def test_unparsable_value(self):
        df = pl.DataFrame({
            "id": ["1", "two"],
            "type": ["call", "call"],
            "src": [1, 2],
            "time": [0.0, 1.0],
        })

        with pytest.raises(DataFormatError, match="Invalid act row"):
            load_acts(df)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataFormatError, match="Acts file not found"):
            load_acts(tmp_path / "nope.csv")

    def test_invalid_source_type(self):
        with pytest.raises(DataFormatError, match="Invalid acts source type"):
            load_acts(42)
