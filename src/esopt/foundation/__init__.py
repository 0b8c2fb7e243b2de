"""
Foundation layer: exceptions, strided linear algebra, numeric kernels and fitness functions.
"""
