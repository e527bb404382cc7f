from .setup import Params
from .verifier import VerifyingKey, verify_proof
from .prover import ProvingKey, create_proof
from .keygen import keygen_vk, keygen_pk
