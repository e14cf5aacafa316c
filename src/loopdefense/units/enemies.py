from loopdefense.units.base import EnemyType


class Goblin(EnemyType):
    type_id = "goblin"
    display_name = "Goblin"
    size_mod = 0.9
    speed_mod = 1.1
    tint = "#4ade80"
    skin = "#22c55e"
    armor = "#0f172a"


class Orc(EnemyType):
    type_id = "orc"
    display_name = "Orc"
    size_mod = 1.1
    speed_mod = 0.95
    tint = "#22c55e"
    skin = "#16a34a"
    armor = "#14532d"


class Maoa(EnemyType):
    type_id = "maoa"
    display_name = "Maoa"
    size_mod = 1.35
    speed_mod = 0.85
    tint = "#f97316"
    skin = "#ea580c"
    armor = "#7c2d12"
