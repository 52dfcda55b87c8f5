# Standings are not stored; they are computed from users, rounds, fixtures
# and predictions (see scoreline/modules/rounds/models.py and
# scoreline/modules/predictions/models.py) on every request.
