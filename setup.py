from setuptools import setup, find_packages


setup(name="utmtrack",
      version='0.2',
      description='Server-Side Urchin (ga.js) Tracking Client',
      long_description='',
      classifiers=[
          'Development Status :: 5 - Production/Stable',
          'Programming Language :: Python :: 3',
          'Topic :: Internet :: WWW/HTTP :: WSGI :: Middleware',
          'Topic :: Internet :: WWW/HTTP :: Site Management',
      ],
      keywords='',
      url='https://pypi.org/project/utmtrack/',
      author='utmtrack contributors',
      install_requires=[
          'webob',
          'httpx',
          'pytz',
          'simplejson',
      ],
      extras_require=dict(
          test=['pytest', 'webtest'],
      ),
      license='MIT',
      packages=find_packages(),
      entry_points=dict(
          console_scripts=[
              'utmtrack-send=utmtrack.client:main',
          ]
      ),
      zip_safe=False)
