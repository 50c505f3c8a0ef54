import numpy as np
from creals import from_f64
from creals.config import configure_logging

configure_logging()

# Rump's example: f(a, b) with a = 77617, b = 33096 is about -0.827396,
# but double precision evaluation loses every correct digit.
a, b = 77617.0, 33096.0

def f(a, b):
    return (333.75 * b**6 + a**2 * (11 * a**2 * b**2 - b**6 - 121 * b**4 - 2)
            + 5.5 * b**8 + a / (2 * b))

x, y = from_f64(a), from_f64(b)
x2, y2 = x * x, y * y
y4 = y2 * y2
y6 = y4 * y2
y8 = y4 * y4
exact = (from_f64(333.75) * y6 + x2 * (11 * x2 * y2 - y6 - 121 * y4 - 2)
         + from_f64(5.5) * y8 + x / (2 * y))

print("Calculated = ", exact.to_f64())
print("Reference  = ", f(np.float64(a), np.float64(b)))
