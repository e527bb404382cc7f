"""
Prove that a secret value lies in [0, 16) using a range check gate,
and that a second secret value lies in [0, 8) using a lookup table
"""

from plonkrange import Value
from plonkrange.dev import MockProver
from plonkrange.gadgets import RangeCheckCircuit
from plonkrange.plonk import Params, create_proof, keygen_pk, keygen_vk, verify_proof
from plonkrange.transcript import Blake2bRead, Blake2bWrite

k = 5
Circuit = RangeCheckCircuit[16, 8]

# secret values
value = 7
lookup_value = 5

circuit = Circuit.with_lookup(value=Value.known(value), lookup_value=Value.known(lookup_value))

# check the witness before paying for a proof
MockProver.run(k, circuit, [[]]).assert_satisfied()

params = Params.setup(k)
vk = keygen_vk(params, circuit.without_witnesses())
pk = keygen_pk(params, vk, circuit.without_witnesses())

transcript = Blake2bWrite()
create_proof(params, pk, circuit, [[]], transcript)
proof = transcript.finalize()

with open("proof", "wb") as f:
    f.write(proof)
print("Proof:", proof.hex())

with open("proof", "rb") as f:
    proof = f.read()

assert verify_proof(params, vk, [[]], Blake2bRead(proof))
print(f"Proof is valid: {value} is in [0, 16) and {lookup_value} is in [0, 8)")

# invalid secret value
circuit = Circuit.with_lookup(value=Value.known(value), lookup_value=Value.known(9))
failures = MockProver.run(k, circuit, [[]]).verify()
assert failures
print(f"Witness is invalid: {failures[0]}")
