from hypothesis import HealthCheck, settings

settings.register_profile(
    "buildseq",
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("buildseq")
