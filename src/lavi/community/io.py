"""
Loading act logs into communities.

Two input formats are supported:

- LAX, the XML act-log format (``<lax><meta><name/></meta><actors/><actions/></lax>``)
- Tabular act logs (CSV files or Polars DataFrames) with one act per row

Both produce a frozen ``Community``. Acts are added in file order; it is the
caller's responsibility that this order is time non-decreasing.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import xml.etree.ElementTree as ET

import polars as pl

from .model import Act, Actor, Call, Community, CommunityBuilder, Reply
from ..common.exceptions import DataFormatError, LaviError
from ..common.logging_config import get_logger, LoggingTimer

logger = get_logger(__name__)

ACT_TYPE_CALL = "call"
ACT_TYPE_REPLY = "reply"

REQUIRED_COLUMNS = ["id", "type", "src", "time"]


def import_lax(path: Union[str, Path], use_dates: bool = False) -> Community:
    """
    Import a LAX formatted act log.

    Parameters
    ----------
    path : Union[str, Path]
        Path to the ``.lax`` file
    use_dates : bool, default False
        If True, act times are seconds since epoch and are displayed as dates

    Returns
    -------
    Community
        Frozen community with the declared actors and all acts

    Raises
    ------
    DataFormatError
        If the file is missing, is not well-formed XML, or an act/actor
        element has a missing or unparsable attribute
    DataIntegrityError
        If act ids repeat or a reply references an unknown act

    Examples
    --------
    >>> community = import_lax("testdata/test1.lax")
    >>> print(community.summary())

    Notes
    -----
    Any act whose ``type`` is not ``call`` is read as a reply. The optional
    ``directed`` and ``weight`` attributes are only meaningful on replies.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise DataFormatError(
            f"Act log file not found: {path}",
            format_type="LAX",
            file_path=str(path)
        )

    with LoggingTimer("import_lax", {"file": file_path.name}):
        try:
            root = ET.parse(file_path).getroot()
        except ET.ParseError as e:
            raise DataFormatError(
                f"Failed to parse LAX file: {e}",
                format_type="LAX",
                file_path=str(path),
                cause=e
            ) from e

        builder = CommunityBuilder(root.findtext(".//meta/name", default="").strip(), use_dates)

        for node in root.iterfind(".//actors/actor"):
            actor_id = _int_attr(node, "id", file_path)
            builder.add_actor(Actor(actor_id, node.get("name", "")))

        for node in root.iterfind(".//actions/act"):
            act_id = _int_attr(node, "id", file_path)
            src = _int_attr(node, "src", file_path)
            time = _float_attr(node, "time", file_path)
            if node.get("type") == ACT_TYPE_CALL:
                builder.add_act(Call(act_id, src, time))
            else:
                builder.add_act(Reply(
                    act_id,
                    src,
                    _int_attr(node, "reference", file_path),
                    time,
                    directed=_optional_bool(node.get("directed"), "directed", file_path),
                    weight=_optional_float(node.get("weight"), "weight", file_path),
                ))

        community = builder.freeze()

    logger.info("Done importing %s: %d acts, %d actors",
                file_path.name, community.act_count, community.actor_count)
    return community


def load_acts(
    source: Union[str, Path, pl.DataFrame],
    name: str = "",
    use_dates: bool = False,
    actors: Optional[Union[str, Path, pl.DataFrame]] = None
) -> Community:
    """
    Build a community from a tabular act log.

    Parameters
    ----------
    source : Union[str, Path, pl.DataFrame]
        CSV path or DataFrame with columns ``id``, ``type``, ``src``, ``time``
        and optionally ``reference``, ``directed``, ``weight``
    name : str, default ""
        Community name
    use_dates : bool, default False
        If True, act times are seconds since epoch
    actors : Union[str, Path, pl.DataFrame], optional
        CSV path or DataFrame with columns ``id`` and optionally ``name``;
        actors that only appear as act sources are registered automatically

    Returns
    -------
    Community
        Frozen community, acts in row order

    Raises
    ------
    DataFormatError
        If the source cannot be read, required columns are missing, the
        ``type`` column holds something other than ``call``/``reply``, or a
        reply row has no reference
    DataIntegrityError
        If act ids repeat or a reply references an unknown act

    Examples
    --------
    >>> acts = pl.DataFrame({
    ...     "id": [1, 2, 3],
    ...     "type": ["call", "reply", "reply"],
    ...     "src": [10, 11, 10],
    ...     "reference": [None, 1, 2],
    ...     "time": [0.0, 5.0, 9.0],
    ... })
    >>> community = load_acts(acts, name="thread")
    >>> community.act_count
    3
    """
    df = _load_table(source, "acts")

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise DataFormatError(
            f"Missing required columns: {missing}",
            format_type="DataFrame",
            details={"available_columns": df.columns, "missing": missing}
        )

    builder = CommunityBuilder(name, use_dates)

    if actors is not None:
        actors_df = _load_table(actors, "actors")
        if "id" not in actors_df.columns:
            raise DataFormatError(
                "Actor table has no 'id' column",
                format_type="DataFrame",
                details={"available_columns": actors_df.columns}
            )
        has_names = "name" in actors_df.columns
        for row in actors_df.iter_rows(named=True):
            builder.add_actor(Actor(int(row["id"]), str(row["name"] or "") if has_names else ""))

    with LoggingTimer("load_acts", {"rows": df.height}):
        for row_number, row in enumerate(df.iter_rows(named=True)):
            builder.add_act(_act_from_row(row, row_number))
        community = builder.freeze()

    logger.info("Done importing %d acts, %d actors", community.act_count, community.actor_count)
    return community


def _act_from_row(row: Dict[str, Any], row_number: int) -> Act:
    act_type = str(row["type"]).strip().lower() if row["type"] is not None else None
    try:
        act_id = int(row["id"])
        src = int(row["src"])
        time = float(row["time"])
        if act_type == ACT_TYPE_CALL:
            return Call(act_id, src, time)
        if act_type == ACT_TYPE_REPLY:
            if row.get("reference") is None:
                raise DataFormatError(
                    f"Reply {act_id} has no reference",
                    format_type="DataFrame",
                    line_number=row_number
                )
            directed = row.get("directed")
            weight = row.get("weight")
            return Reply(
                act_id,
                src,
                int(row["reference"]),
                time,
                directed=None if directed is None else _parse_bool(directed),
                weight=None if weight is None else float(weight),
            )
    except LaviError:
        raise
    except (TypeError, ValueError) as e:
        raise DataFormatError(
            f"Invalid act row: {e}",
            format_type="DataFrame",
            line_number=row_number,
            cause=e
        ) from e

    raise DataFormatError(
        f"Unknown act type {row['type']!r}",
        format_type="DataFrame",
        line_number=row_number,
        details={"expected": [ACT_TYPE_CALL, ACT_TYPE_REPLY]}
    )


def _load_table(source: Union[str, Path, pl.DataFrame], what: str) -> pl.DataFrame:
    if isinstance(source, pl.DataFrame):
        return source
    if isinstance(source, (str, Path)):
        file_path = Path(source)
        if not file_path.exists():
            raise DataFormatError(
                f"{what.capitalize()} file not found: {source}",
                format_type="CSV",
                file_path=str(source)
            )
        try:
            logger.debug("Loading %s from file: %s", what, file_path)
            return pl.read_csv(file_path)
        except pl.exceptions.PolarsError as e:
            raise DataFormatError(
                f"Failed to parse CSV file: {e}",
                format_type="CSV",
                file_path=str(source),
                cause=e
            ) from e
    raise DataFormatError(
        f"Invalid {what} source type: {type(source)}. Expected str, Path or pl.DataFrame",
        format_type="DataFrame"
    )


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _int_attr(node: ET.Element, attr: str, file_path: Path) -> int:
    value = node.get(attr)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise DataFormatError(
            f"<{node.tag}> has missing or invalid '{attr}' attribute: {value!r}",
            format_type="LAX",
            file_path=str(file_path),
            cause=e
        ) from e


def _float_attr(node: ET.Element, attr: str, file_path: Path) -> float:
    value = node.get(attr)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise DataFormatError(
            f"<{node.tag}> has missing or invalid '{attr}' attribute: {value!r}",
            format_type="LAX",
            file_path=str(file_path),
            cause=e
        ) from e


def _optional_bool(value: Optional[str], attr: str, file_path: Path) -> Optional[bool]:
    if value is None:
        return None
    try:
        return _parse_bool(value)
    except ValueError as e:
        raise DataFormatError(
            f"Invalid '{attr}' attribute: {value!r}",
            format_type="LAX",
            file_path=str(file_path),
            cause=e
        ) from e


def _optional_float(value: Optional[str], attr: str, file_path: Path) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as e:
        raise DataFormatError(
            f"Invalid '{attr}' attribute: {value!r}",
            format_type="LAX",
            file_path=str(file_path),
            cause=e
        ) from e
