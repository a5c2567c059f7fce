# -*- coding: utf-8 -*-

from .run import main

main()
