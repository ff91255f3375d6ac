from setuptools import setup

setup(
    name='mdPreview',
    version='0.1.0',
    packages=['mdpreview',],
    package_data={'mdpreview': ['templates/*.html', 'templates/*.svg']},
    long_description=open('README.rst').read(),
    python_requires='>=3.8',
    install_requires=[
        'jinja2',
        'linkify-it-py',
        'markdown-it-py',
        'mdit-py-plugins',
        'pygments',
        'watchdog',
    ],
    extras_require={
        'browser': ['selenium'],
        'test': ['pytest'],
    },
    entry_points=dict(
        console_scripts=["mdprev = mdpreview.command_line:main",])
)
