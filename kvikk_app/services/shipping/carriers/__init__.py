from .kvikk import KvikkCarrier
