"""Shared test fixtures."""

import pytest

from emvlua.parser import parse


SAMPLE = '''\
-- vehicle lighting
EMV.Auto = {
  { ID = "Whelen Liberty", Scale = 1, Pos = Vector(0, -10.5, 80), Ang = Angle(0, 90, 0), Color1 = "RED", Color2 = BLUE, Phase = "A" },
  { ID = "Grille Light", Scale = 0.9, Pos = Vector(12, 100, 40.25), Ang = Angle(0, 0, 0), Color1 = AMBER },
  { ID = "Rear Deck", Pos = Vector(0, -90, 50), Ang = Angle(0, -90, 0), Color1 = "WHITE" }
}

EMV.Selections = {
  {
    Name = "Lightbar",
    Options = {
      { Name = "Full", Auto = {1, 2} },
      { Name = "None", Auto = {} }
    }
  },
  {
    Name = "Rear",
    Options = {
      { Name = "Deck", Auto = {3} }
    }
  }
}

PI.Meta = {
  headlight = { AngleOffset = -90, W = 12, H = 12, Sprite = "sprites/emv/blank", Scale = 1, VisRadius = 0.4 }
}

PI.States = {}
PI.States.Headlights = {{1, "WHITE", 1}, {2, WHITE, 0.5}}
PI.States.Brakes = {}

PI.Positions = {}
PI.Positions[1] = {Vector(20, 110, 40), Angle(0, 0, 0), "headlight"}

EMV.Lamps = {
  { ID = "Spot", Pos = Vector(30, 60, 70), Ang = Angle(0, 90, 0), Color = "WHITE" }
}

EMV.Sequences = {
  Sequences = {
    { Name = "CODE 1", Stage = "M1", Components = {}, Disconnect = {} },
    { Name = "CODE 3", Stage = "M3", Components = { ["1"] = "ALL" }, Disconnect = {2} }
  },
  Traffic = {
    { Name = "LEFT", Components = { ["1"] = "LEFT" }, Disconnect = {} }
  },
  Illumination = {
    { Name = "TKDN", Components = {{1, W, 1}}, Lights = {{Vector(0, 10, 50), Angle(0, 0, 0), "takedown"}}, Disconnect = {} }
  }
}

EMV.Sections = {
  ["lightbar"] = {
    { {1, R, 1}, {2, B, 1} },
    { {1, B, 1}, {2, R, 1} }
  }
}

EMV.Patterns = {
  ["lightbar"] = {
    ["code1"] = { 1 },
    ["code3"] = { 1, 1, 2, 2 }
  }
}
'''


@pytest.fixture
def sample_text():
    return SAMPLE


@pytest.fixture
def sample_doc():
    return parse(SAMPLE)


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "vehicle.lua"
    path.write_text(SAMPLE, encoding="utf-8")
    return path
