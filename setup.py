from setuptools import setup

setup(
    name='fNIRS_NST',
    version='0.1.0',
    packages=['fnirs_nst', 'fnirs_nst.channels', 'fnirs_nst.viz', 'fnirs_nst.read',
              'fnirs_nst.processing', 'fnirs_nst.preprocessing'],
    py_modules=['main'],
    license='MIT',
    description='fNIRS channel label parsing/validation and zero-phase IIR filtering.',
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'pandas',
        'matplotlib',
        'scipy',
        'tqdm',
        'natsort',
        'setuptools'],
    extras_require={
        'test': ['pytest'],
    })
