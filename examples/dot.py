import numpy as np
from creals import from_f32, from_int
from creals.config import configure_logging

configure_logging()

# Create two random float32 arrays in the range [0,1)
A0 = np.random.rand(1024).astype(np.float32)
A1 = np.random.rand(1024).astype(np.float32)

# Accumulate the exact dot product; every leaf is the exact float32 value.
acc = from_int(0)
for x, y in zip(A0, A1):
    acc = acc + from_f32(x) * from_f32(y)

print("Exact, rounded once     : ", acc.to_f32())
print("Using fp32 arithmetic   : ", np.dot(A0, A1))
print("Using fp64 arithmetic   : ", np.dot(A0.astype(np.float64), A1.astype(np.float64)))
