import json

import pytest

from blockfall.game import Board, Piece, Position, TetrominoType
from blockfall.session import (
    HIGH_SCORE_KEY,
    SESSION_KEY,
    JsonFileStore,
    MemoryStore,
    SessionDecodeError,
    SessionRecord,
    decode_high_score,
    decode_session,
    dumps_session,
    encode_session,
    loads_session,
)
from tests.helpers import make_engine


def sample_record():
    board = Board.create(20, 10)
    board.grid[19, 0] = 1
    board.grid[19, 9] = 7
    current = Piece.of_type(TetrominoType.T, Position(4, 3))
    nxt = Piece.of_type(TetrominoType.S)
    held = Piece.of_type(TetrominoType.I, Position(2, 1))
    held.rotation_count = 1
    return SessionRecord(board, 1300, 2, current, nxt, held, False)


def test_encoded_record_uses_persisted_field_names():
    data = encode_session(sample_record())
    assert set(data) == {"gameBoard", "score", "level", "currentTetromino",
                         "nextTetromino", "heldTetromino", "canHoldTetromino"}
    assert data["gameBoard"][19][0] == {"isFilled": True, "color": "cyan"}
    assert data["gameBoard"][0][0] == {"isFilled": False, "color": None}
    assert data["currentTetromino"] == {
        "shape": [[0, 6, 0], [6, 6, 6], [0, 0, 0]],
        "color": "purple",
        "position": {"row": 4, "column": 3},
        "rotations": 0,
    }
    assert data["heldTetromino"]["rotations"] == 1
    assert data["canHoldTetromino"] is False


def test_decode_restores_typed_record():
    record = loads_session(dumps_session(sample_record()), 20, 10)
    assert record.score == 1300 and record.level == 2
    assert (record.board.grid == sample_record().board.grid).all()
    assert record.current.color == "purple"
    assert record.current.position == Position(4, 3)
    assert record.held is not None and record.held.rotation_count == 1
    assert record.next.shape.tolist() == [[0, 5, 5], [5, 5, 0], [0, 0, 0]]
    assert record.can_hold is False


def test_decode_null_held_piece():
    data = encode_session(sample_record())
    data["heldTetromino"] = None
    assert decode_session(data, 20, 10).held is None


def test_decode_defaults_missing_optional_fields():
    data = encode_session(sample_record())
    del data["canHoldTetromino"]
    del data["currentTetromino"]["rotations"]
    record = decode_session(data, 20, 10)
    assert record.can_hold is True
    assert record.current.rotation_count == 0


def test_decode_recomputes_inconsistent_level():
    data = encode_session(sample_record())
    data["level"] = 9
    assert decode_session(data, 20, 10).level == 2


def corrupt(mutator):
    data = encode_session(sample_record())
    mutator(data)
    return data


@pytest.mark.parametrize(
    "mutator",
    [
        lambda d: d.pop("gameBoard"),
        lambda d: d["gameBoard"].pop(),
        lambda d: d["gameBoard"][0].pop(),
        lambda d: d["gameBoard"][3].__setitem__(2, {"isFilled": True, "color": "magenta"}),
        lambda d: d["gameBoard"][3].__setitem__(2, {"isFilled": "yes", "color": None}),
        lambda d: d.__setitem__("score", -5),
        lambda d: d.__setitem__("score", "100"),
        lambda d: d.__setitem__("score", True),
        lambda d: d["currentTetromino"].__setitem__("shape", [[1, 1], [1]]),
        lambda d: d["currentTetromino"].__setitem__("shape", [[0, 0], [0, 0]]),
        lambda d: d["currentTetromino"].__setitem__("shape", []),
        lambda d: d["currentTetromino"].__setitem__("color", "pink"),
        lambda d: d["currentTetromino"].__setitem__("position", {"row": 1.5, "column": 0}),
        lambda d: d["nextTetromino"].pop("position"),
        lambda d: d.__setitem__("heldTetromino", "I"),
        lambda d: d.__setitem__("canHoldTetromino", 1),
    ],
)
def test_decode_rejects_malformed_records(mutator):
    with pytest.raises(SessionDecodeError):
        decode_session(corrupt(mutator), 20, 10)


def test_decode_rejects_board_of_other_size():
    with pytest.raises(SessionDecodeError):
        loads_session(dumps_session(sample_record()), 22, 10)


def test_loads_rejects_invalid_json():
    with pytest.raises(SessionDecodeError):
        loads_session("{", 20, 10)


@pytest.mark.parametrize("raw,expected", [(None, 0), ("250", 250), ("-1", 0), ('"12"', 0), ("true", 0), ("oops", 0)])
def test_decode_high_score(raw, expected):
    assert decode_high_score(raw) == expected


def test_memory_store_roundtrip():
    store = MemoryStore()
    assert store.get("k") is None
    store.set("k", "v")
    assert "k" in store and store.get("k") == "v"
    store.delete("k")
    assert "k" not in store


def test_json_file_store_writes_one_file_per_key(tmp_path):
    store = JsonFileStore(tmp_path / "saves")
    assert store.get(SESSION_KEY) is None
    store.set(SESSION_KEY, '{"a": 1}')
    assert (tmp_path / "saves" / "savedGameSession.json").read_text(encoding="utf-8") == '{"a": 1}'
    assert store.get(SESSION_KEY) == '{"a": 1}'
    store.delete(SESSION_KEY)
    assert store.get(SESSION_KEY) is None
    store.delete(SESSION_KEY)


def test_engine_session_survives_file_store(tmp_path):
    store = JsonFileStore(tmp_path)
    engine = make_engine((TetrominoType.L, TetrominoType.J), store=store)
    engine.new_game()
    engine.move_right()
    engine.hold()
    engine.pause()

    saved = json.loads((tmp_path / "savedGameSession.json").read_text(encoding="utf-8"))
    assert saved["heldTetromino"]["color"] == "orange"
    assert saved["currentTetromino"]["color"] == "blue"
    assert saved["canHoldTetromino"] is False

    other = make_engine(store=JsonFileStore(tmp_path))
    assert other.continue_game()
    assert other.held.color == "orange"
    assert not other.can_hold


class FailingStore(MemoryStore):
    def set(self, key, value):
        raise OSError("disk full")


def test_storage_failures_do_not_break_play():
    engine = make_engine(store=FailingStore())
    engine.new_game()
    engine.pause()
    assert engine.state.value == "paused"
    engine.resume()
    assert engine.state.value == "playing"
    assert HIGH_SCORE_KEY not in engine.store


def test_json_file_store_reports_undecodable_file_as_os_error(tmp_path):
    (tmp_path / "savedGameSession.json").write_bytes(b'\xff\xfe{"score": 1}')
    with pytest.raises(OSError):
        JsonFileStore(tmp_path).get(SESSION_KEY)


def test_undecodable_save_files_are_ignored(tmp_path):
    (tmp_path / "savedGameSession.json").write_bytes(b'\xff\xfe{"score": 1}')
    (tmp_path / "highScore.json").write_bytes(b"\xff\xff")

    engine = make_engine(store=JsonFileStore(tmp_path))
    assert engine.high_score == 0
    assert not engine.continue_game()
    assert engine.state.value == "gameOver"

    engine.new_game()
    assert engine.state.value == "playing"
