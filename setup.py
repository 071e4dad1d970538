from setuptools import setup, find_packages

setup(name='aioetcd2',
      version='0.1.0',
      description='asyncio client of the etcd v2 http api',
      author='Zeng Ke',
      author_email='zk@bixin.com',
      packages=find_packages(include=['aioetcd2', 'aioetcd2.*']),
      classifiers=[
          'Development Status :: 4 - Beta',
          'Intended Audience :: Developers',
          'License :: MIT',
          'Programming Language :: Python :: 3.8',
          'Programming Language :: Python :: 3.9',
          'Programming Language :: Python :: 3 :: Only',
          'Operating System :: POSIX',
          'Topic :: Database',
      ],

      install_requires=[
          'python-dateutil',
          'aiohttp >= 3.8',
          'sentry-sdk >= 1.3.1',
      ],
      extras_require={
          'test': [
              'pytest',
              'pytest-asyncio >= 0.17',
          ],
      },
      python_requires='>=3.8',
)
