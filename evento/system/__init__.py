"""Host diagnostics: operating system, CPU, memory and window manager."""