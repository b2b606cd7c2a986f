import rng


def test_hash_seed_matches_linear_congruential_step():
    assert rng.hash_seed(1) == 1103527590
    assert rng.hash_seed(0) == rng.INCREMENT


def test_hash_seed_stays_within_modulus():
    seed = 987654321
    for _ in range(1000):
        seed = rng.hash_seed(seed)
        assert 0 <= seed < rng.MODULUS


def test_hash_seed_is_deterministic():
    assert rng.hash_seed(424242) == rng.hash_seed(424242)


def test_scale_maps_into_unit_interval():
    assert rng.scale(0) == 0.0
    assert rng.scale(rng.MODULUS // 2) == 0.5
    assert 0.0 <= rng.scale(rng.MODULUS - 1) < 1.0
