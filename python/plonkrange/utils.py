import logging
import os
import random
import time

logger = logging.getLogger(__name__)


def get_random_int(n_max, rng=None):
    """Get random integer in [1, n_max] range"""
    rand = rng or random.SystemRandom()
    return rand.randint(1, n_max)


def get_n_jobs():
    """Get number of supported cores for multiprocessing if enabled"""
    check_env = os.environ.get("PLONKRANGE_PARALLEL_CPU")
    if check_env:
        return int(check_env)
    else:
        return -1


def get_parallel_threshold():
    """Minimum number of terms before work is split with joblib"""
    check_env = os.environ.get("PLONKRANGE_PARALLEL_THRESHOLD")
    if check_env:
        return int(check_env)
    else:
        return 4096


def split_list(data, n):
    """Split data into n chunks"""
    return [data[i : i + n] for i in range(0, len(data), n)]


def next_power_of_two(n: int):
    """Get next 2^x number from n"""
    return 1 << (n - 1).bit_length()


def is_power_of_two(n):
    return n > 0 and (n & (n - 1)) == 0


def two_adicity(n: int):
    """Largest s such that 2^s divides n"""
    return (n & -n).bit_length() - 1


def batch_modinv(a: list, m: int):
    """
    Compute modular inverse of `a[i]` over modulus `m` in batch
    """
    n = len(a)
    if n == 0:
        return []

    prefix_products = [1] * n

    for i in range(1, n):
        prefix_products[i] = (prefix_products[i - 1] * a[i - 1]) % m

    total_product = (prefix_products[-1] * a[-1]) % m

    total_inverse = pow(total_product, -1, m)

    inverses = [0] * n
    suffix_inverse = total_inverse
    for i in range(n - 1, -1, -1):
        inverses[i] = (suffix_inverse * prefix_products[i]) % m
        suffix_inverse = (suffix_inverse * a[i]) % m

    return inverses


class Timer:
    def __init__(self, name):
        self.start_time = 0
        self.end_time = 0
        self.name = name

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.time()
        elapsed_time = self.end_time - self.start_time
        logger.debug("%s: %.2f seconds", self.name, elapsed_time)
