import pytest

from linkcsg import Session, VariableStore


@pytest.fixture
def variables():
    return VariableStore({
        "Block": {"Length": 20.0, "Width": 16.0, "Height": 12.0, "Mat": 3},
        "Flange": {"Radius": 3.0, "OuterRadius": 6.0, "Thick": 1.5,
                   "NBolts": 4, "BoltRadius": 0.5, "Mat": 5, "BoltMat": 7},
    })


@pytest.fixture
def session(variables):
    return Session(variables)
