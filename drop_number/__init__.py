"""
Drop Number Package
===================

Tile-merging drop puzzle. Values dropped into a column settle under
gravity; connected equal tiles merge and may set off chain reactions
until the board is stable.

All tunable parameters are in game_config.yaml.
"""
