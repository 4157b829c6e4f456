import pytest

from kifu_chess import ChessRules


def make_move(uci: str) -> dict:
    m = {"from": uci[:2], "to": uci[2:4]}
    if len(uci) == 5:
        m["promote"] = uci[4]
    return m


@pytest.fixture()
def mv():
    return make_move


@pytest.fixture()
def rules() -> ChessRules:
    return ChessRules()


@pytest.fixture()
def linear_record() -> dict:
    return {
        "header": {"Event": "Linear"},
        "moves": [
            {},
            {"move": make_move("e2e4")},
            {"move": make_move("e7e5")},
            {"move": make_move("g1f3")},
        ],
    }


@pytest.fixture()
def branching_record() -> dict:
    """1. e4 e5 (1... c5) 2. Nf3 Nc6 resigns (1. Nf3 Nc6 2. e4 e5).

    The ply-4 positions of the main line and of the 1. Nf3 fork are the same.
    """
    return {
        "header": {"Event": "Study", "White": "A", "Black": "B"},
        "moves": [
            {"comments": ["Opening study", "two move orders"]},
            {
                "comments": ["King's pawn"],
                "move": make_move("e2e4"),
                "time": {"now": 3.0, "total": 297.0},
                "forks": [
                    [
                        {"move": make_move("g1f3")},
                        {"move": make_move("b8c6")},
                        {"comments": ["bad: transposes anyway"], "move": make_move("e2e4")},
                        {"move": make_move("e7e5")},
                    ]
                ],
            },
            {"move": make_move("e7e5"), "forks": [[{"move": make_move("c7c5")}]]},
            {"move": make_move("g1f3")},
            {"move": make_move("b8c6")},
            {"special": "RESIGN"},
        ],
    }
