#!/usr/bin/env python3
"""Quick keystream benchmark - pure-Python vs numpy XOR path"""
import os
import time


PAYLOAD = os.urandom(0x8000)
ITERATIONS = 200


def bench(fast_min: str):
    os.environ["NCMUNBOX_FAST_MIN"] = fast_min
    from ncmunbox.cipher import StreamCipher

    cipher = StreamCipher(b"benchmark-session-key")
    start = time.perf_counter()
    for _ in range(ITERATIONS):
        result = cipher.decrypt_chunk(PAYLOAD)
    elapsed = time.perf_counter() - start
    return elapsed, result


def main():
    print(f"Benchmarking keystream XOR ({ITERATIONS} chunks of {len(PAYLOAD)} bytes)...\n")

    print("pure Python ...")
    py_time, py_result = bench(str(1 << 30))
    print(f"  Time: {py_time:.3f}s ({py_time / ITERATIONS * 1000:.2f} ms/chunk)")

    print("numpy ...")
    np_time, np_result = bench("0")
    print(f"  Time: {np_time:.3f}s ({np_time / ITERATIONS * 1000:.2f} ms/chunk)")

    if py_result != np_result:
        print("\n✗ paths disagree")
        return 1
    print("\n✅ Benchmark complete, outputs identical")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
