from py_ecc import optimized_bls12_381, optimized_bn128

BN254_SCALAR_FIELD = optimized_bn128.curve_order
BN254_MODULUS = optimized_bn128.field_modulus

BLS12_381_SCALAR_FIELD = optimized_bls12_381.curve_order
BLS12_381_MODULUS = optimized_bls12_381.field_modulus

# smallest generators of the multiplicative groups of the scalar fields
MULTIPLICATIVE_GENERATOR = {
    BN254_SCALAR_FIELD: 5,
    BLS12_381_SCALAR_FIELD: 7,
}
